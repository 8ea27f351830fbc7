"""
LLM orchestration package.

Provider adapters, the structured extraction engine, the boolean classifiers
built on it, and the orchestrator that ties them together.
"""
