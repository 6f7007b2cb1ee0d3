"""
Utility modules for FeedbackPulse.

Cross-cutting concerns:
- Formatting: Lookup tables and view models for the dashboard
- Storage: Report output
"""
