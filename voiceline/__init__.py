"""VoiceLine: sales call audio to structured CRM rows."""

__version__ = "1.0.0"
