"""
Agent implementations for FeedbackPulse.

Contains the modules that turn branch reviews into dashboard statistics:
- Ingestion Agent (retrieval and filters)
- Review Statistics Aggregator
"""
