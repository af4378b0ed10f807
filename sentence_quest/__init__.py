"""
Sentence Quest - progression service for a kindergarten sentence-building game.
"""
