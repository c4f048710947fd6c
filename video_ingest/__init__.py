"""Video metadata ingestion and analysis submission"""

__version__ = "0.1.0"
