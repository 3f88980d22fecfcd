"""Sample shoe shop bot: FAQ answers, intent interrupts and scripted dialogs."""

__version__ = "0.1.0"
