"""dimems: file-based short-term, episodic and long-term memory."""

__version__ = "0.1.0"
