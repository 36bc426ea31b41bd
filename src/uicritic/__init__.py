"""UI Critic - AI critique of uploaded UI design images."""

__version__ = "0.1.0"
