"""Typo Learn - self-learning correction of recurring transcription typos.

Watches the edits a user makes to speech-to-text output, learns the
single-word typos they keep fixing and corrects them automatically in
later transcriptions.
"""

__version__ = "0.1.0"
