"""Async client for the Code Assist generative AI API."""
