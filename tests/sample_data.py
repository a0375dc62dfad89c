"""Question fixtures shared by the unit and route tests."""

TWO_QUESTIONS = [
    {
        "id": 101,
        "question_text": "Which phase comes first in ethical hacking?",
        "options": ["Reconnaissance", "Scanning", "Gaining Access", "Covering Tracks"],
        "correct_answer": "0",
        "explanation": "Reconnaissance gathers information before anything else.",
        "points": 2,
    },
    {
        "id": 102,
        "question_text": "Which hacker type is motivated by financial gain?",
        "options": ["White Hat", "Black Hat", "Gray Hat", "Script Kiddie"],
        "correct_answer": "1",
        "explanation": "Black hats break in for personal or financial gain.",
        "points": 2,
    },
]
