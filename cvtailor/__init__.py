"""cvtailor - job-aware LaTeX CV tailoring and mock interview sessions.

Core pieces:
- Resilient generation client with provider failover
- Structured extraction agents with deterministic fallbacks
- Tailoring pipeline and literal edit engine for LaTeX templates
- Mock interview sessions scored by the service or by local heuristics
"""

__version__ = "0.3.0"
