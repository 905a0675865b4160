"""
api/sample_questions.py — 문제은행 파일 없이 체험할 수 있는 샘플 문제
"""

from timed_exam.models.question_model import Question

SAMPLE_QUESTIONS: list[Question] = [
    Question(
        id="sample-1",
        question="Which layer of the OSI model is responsible for routing packets between networks?",
        options=["Data Link", "Network", "Transport", "Session", ""],
        correctIndex=1,
        explanation="The Network layer (layer 3) handles logical addressing and routing.",
    ),
    Question(
        id="sample-2",
        question="What does HTTP status code 404 mean?",
        options=["Server error", "Moved permanently", "Not found", "Unauthorized"],
        correctIndex=2,
        explanation="404 Not Found: the server cannot find the requested resource.",
    ),
    Question(
        id="sample-3",
        question="Which data structure follows first-in, first-out order?",
        options=["Stack", "Queue", "Heap", "", "Tree"],
        correctIndex=1,
        explanation="A queue removes elements in the order they were added.",
    ),
    Question(
        id="sample-4",
        question="What is the time complexity of binary search on a sorted array?",
        options=["O(n)", "O(n log n)", "O(log n)", "O(1)"],
        correctIndex=2,
        explanation="Each step halves the search range.",
    ),
    Question(
        id="sample-5",
        question="Which SQL clause filters groups after aggregation?",
        options=["WHERE", "HAVING", "ORDER BY", "LIMIT"],
        correctIndex=1,
    ),
]
