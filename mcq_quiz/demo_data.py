"""
Built-in demo questions, used when the question table is empty or unreachable.
"""
from typing import Any, Dict, List

DEMO_QUESTIONS: List[Dict[str, Any]] = [
    {
        "id": 1,
        "questiontext": "What is the capital of India?",
        "optiona": "Mumbai",
        "optionb": "New Delhi",
        "optionc": "Bangalore",
        "optiond": "Chennai",
        "correctoption": "b",
    },
    {
        "id": 2,
        "questiontext": "Which planet is known as the Red Planet?",
        "optiona": "Venus",
        "optionb": "Mars",
        "optionc": "Jupiter",
        "optiond": "Saturn",
        "correctoption": "b",
    },
    {
        "id": 3,
        "questiontext": "What is 2 + 2?",
        "optiona": "3",
        "optionb": "4",
        "optionc": "5",
        "optiond": "6",
        "correctoption": "b",
    },
    {
        "id": 4,
        "questiontext": "Who wrote Romeo and Juliet?",
        "optiona": "Jane Austen",
        "optionb": "Charles Dickens",
        "optionc": "William Shakespeare",
        "optiond": "Mark Twain",
        "correctoption": "c",
    },
    {
        "id": 5,
        "questiontext": "What is the largest ocean?",
        "optiona": "Atlantic Ocean",
        "optionb": "Indian Ocean",
        "optionc": "Arctic Ocean",
        "optiond": "Pacific Ocean",
        "correctoption": "d",
    },
]
