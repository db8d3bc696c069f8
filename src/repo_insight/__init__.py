"""repo-insight - AI-assisted GitHub repository analyzer."""

__version__ = "0.1.0"
