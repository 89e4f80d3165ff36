"""
JobAI: Provider Dispatch Service for a Job-Search Assistant

Serves resume analysis, job matching, cover letters, chat and resume
improvement suggestions through one of several interchangeable LLM
backends (OpenAI, Gemini), switchable at runtime.
"""

__version__ = "0.1.0"
