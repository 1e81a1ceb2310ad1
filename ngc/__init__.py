"""ngc: IDE bridge between an editor session and Gemini/Qwen CLIs."""

__version__ = "0.5.0"
