"""SBE Earthing back office: declarative forms, submission store and exports."""

__version__ = "0.1.0"
