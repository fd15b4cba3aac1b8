"""
Relevance Engine - personalized trend ranking

This package handles:
- Tagging trends with policy domains, geography and entities
- Scoring trends per organization against declared and learned interests
- Selecting a diverse daily slate
- Learning topic affinities from campaign outcomes, and decaying them
"""
