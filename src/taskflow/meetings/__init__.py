"""
Meeting assistant.

- extractor.py: LLM call -> minutes + suggested action items
- sanitize.py: untrusted suggestions -> validated task drafts
- meeting_store.py / meeting_api.py: meeting records and the accept flow
"""
