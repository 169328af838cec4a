"""
Jotter: Local-first notes for the terminal and your phone.

A small note keeper that provides:
- Write-through persistence (every change is saved before returning)
- Lemmatized text normalization on edit
- CLI and Telegram surfaces over one notes store
"""

__version__ = "0.1.0"
