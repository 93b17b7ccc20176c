"""ChatGPT-clone backend and conversation core."""
