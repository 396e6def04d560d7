"""
Infrastructure layer - Adapters for the model provider, the chat platform, caching and configuration.
"""
