"""
medrecall - spaced repetition scheduling for flashcards and questions.

- medrecall.sm2: SM-2 engine for three-button flashcard review
- medrecall.fsrs: step-based FSRS engine with per-deck options
- medrecall.ratings: rating vocabularies -> grades
- medrecall.study_queue: queues and daily limits
- medrecall.review_service: load/schedule/persist review submissions
"""

__version__ = "0.1.0"
