"""
Lead Intent Scoring Engine
==========================
Scores a lead's buying intent for a product in two parts:
  Rules: role relevance, industry match, data completeness (0-50)
  AI:    LLM classification of intent as High/Medium/Low (10/30/50)
"""

__version__ = "1.0.0"
__author__ = "Lead Scoring Team"
