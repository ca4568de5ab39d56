"""Domain models and errors.

- models: ChatMessage / ChatRequest / ExplainResult and friends.
- conversation: ConversationHistory, the system-message-first message list.
- exceptions: BusinessError hierarchy.
"""
