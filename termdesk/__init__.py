"""termdesk - terminal-centred desktop workspace engine."""

__version__ = "0.1.0"
__logo__ = "◆"
