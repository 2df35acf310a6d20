"""AI Mentor: AI-generated notes, keyword explanations and code execution playback."""
