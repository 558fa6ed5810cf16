"""
入站邮件解析

识别候选人回复的初筛问卷邮件，解析答案并判断是否通过。
"""
import re
from typing import Dict, Optional


SCREENING_KEYWORDS = [
    "screening questions",
    "application questions",
    "re:",
    "response to",
    "answers",
]

POSITIVE_KEYWORDS = [
    "yes",
    "available",
    "experience",
    "skilled",
    "proficient",
    "familiar",
    "years",
    "worked",
    "developed",
    "managed",
]

MIN_POSITIVE_KEYWORDS = 2

ADDRESS_PATTERN = re.compile(r"<([^>]+)>")
NUMBERED_PATTERN = re.compile(r"(\d+)\.\s*([^\n\r]+)")
QA_PATTERN = re.compile(
    r"^\s*(?:Q:|Question\s*\d*:)\s*(.+?)\s*[\r\n]+\s*(?:A:|Answer:)\s*([^\r\n]+)",
    re.IGNORECASE | re.MULTILINE,
)


def extract_email(from_field: Optional[str]) -> str:
    """从 "Name <addr>" 或裸地址中取出邮箱，统一小写"""
    value = from_field or ""
    match = ADDRESS_PATTERN.search(value)
    address = match.group(1) if match else value
    return address.strip().lower()


def is_screening_response(subject: Optional[str], text: Optional[str]) -> bool:
    subject_lower = (subject or "").lower()
    text_lower = (text or "").lower()
    return any(k in subject_lower or k in text_lower for k in SCREENING_KEYWORDS)


def _slug(question: str) -> str:
    return re.sub(r"[^a-zA-Z0-9]", "_", question[:50]).lower()


def parse_screening_answers(text: Optional[str]) -> Dict[str, str]:
    """
    解析邮件正文中的答案

    "1. 答案" 解析为 question_1；"Q: 问题 / A: 答案" 以问题文本生成键名
    """
    answers: Dict[str, str] = {}
    if not text:
        return answers

    for number, answer in NUMBERED_PATTERN.findall(text):
        answers[f"question_{number}"] = answer.strip()

    for question, answer in QA_PATTERN.findall(text):
        answers[_slug(question.strip())] = answer.strip()

    return answers


def count_positive_keywords(answers: Dict[str, str]) -> int:
    combined = " ".join(answers.values()).lower()
    return sum(1 for k in POSITIVE_KEYWORDS if k in combined)


def evaluate_screening_answers(answers: Dict[str, str]) -> bool:
    """没有答案不通过，否则至少命中两个积极关键词"""
    if not answers:
        return False
    return count_positive_keywords(answers) >= MIN_POSITIVE_KEYWORDS
