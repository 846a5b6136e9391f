class LlmClient:
    """Strategy interface for a chat-completion backend."""
    def complete(self, prompt: str) -> str:
        raise NotImplementedError
