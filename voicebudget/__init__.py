"""
Voice Budget - Source Package

A voice-driven budget tracker: say "spend $25 on transportation" or
"show my budget" and the command is parsed, applied to your records
and confirmed back to you.

DESIGN PRINCIPLES:
1. One parser and one executor shared by every front end
2. Fail visibly with a friendly message, log the detail
3. Every step is auditable
4. Storage and speech providers are swappable
"""

__version__ = "1.0.0"
__author__ = "Voice Budget Team"
