"""
MCQ Quiz App - quiz session engine, scoring and hosted backend client.
"""
