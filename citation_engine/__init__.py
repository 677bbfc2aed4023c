"""
Citation Engine Package.

Scoring and classification engine for the citation sources that LLM answer
engines rely on when they mention a brand. Derives a value score and a
strategic quadrant per source, a metric correlation matrix and a ranked list
of key takeaways, and serves them over a FastAPI service layer.

Subpackages:
    - api: FastAPI route handlers
    - core: Configuration, scheduler lifecycle and dependencies
    - models: Pydantic schemas and enums
    - services: Business logic services
"""

__version__ = "1.0.0"
