"""
简历文本提取服务

按文件头魔数识别类型（不依赖扩展名）：
PDF 使用 PyMuPDF，DOCX 使用 python-docx，纯文本按 UTF-8 解码。
提取失败以结果对象返回，不抛出异常。
"""
import io
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

import fitz  # PyMuPDF
from docx import Document
from loguru import logger


PDF_MAGIC = b"%PDF"
ZIP_MAGIC = b"PK\x03\x04"
OLE_MAGIC = bytes.fromhex("d0cf11e0a1b11ae1")

TEXT_SAMPLE_SIZE = 512
MAX_NON_PRINTABLE_RATIO = 0.1

EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
PHONE_PATTERN = re.compile(r"(?:\+?\d{1,3}[\s.-]?)?(?:\(?\d{3}\)?[\s.-]?)\d{3}[\s.-]?\d{4}")
EXPERIENCE_PATTERN = re.compile(
    r"(\d{1,2})\s*\+?\s*(?:years?|yrs?)(?:\s+of)?(?:\s+\w+)?\s+experience",
    re.IGNORECASE,
)


@dataclass
class ExtractionResult:
    """文本提取结果"""
    success: bool
    text: str = ""
    file_type: str = "unknown"
    error: Optional[str] = None


def detect_file_type(data: bytes) -> str:
    """根据文件头判断类型: pdf / docx / doc / txt / unknown"""
    if data.startswith(PDF_MAGIC):
        return "pdf"
    if data.startswith(ZIP_MAGIC):
        return "docx"
    if data.startswith(OLE_MAGIC):
        return "doc"

    sample = data[:TEXT_SAMPLE_SIZE]
    if not sample:
        return "unknown"
    # 控制字符（制表、换行、回车除外）视为不可打印；高位字节按 UTF-8 文本处理
    non_printable = sum(1 for b in sample if (b < 32 and b not in (9, 10, 13)) or b == 127)
    if non_printable / len(sample) < MAX_NON_PRINTABLE_RATIO:
        return "txt"
    return "unknown"


def _extract_pdf(data: bytes) -> str:
    parts = []
    with fitz.open(stream=data, filetype="pdf") as doc:
        for page in doc:
            text = page.get_text()
            if text:
                parts.append(text)
    return "\n\n".join(parts)


def _extract_docx(data: bytes) -> str:
    doc = Document(io.BytesIO(data))
    parts = [p.text for p in doc.paragraphs if p.text.strip()]
    for table in doc.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if cells:
                parts.append(" | ".join(cells))
    return "\n".join(parts)


def _extract_txt(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def extract_text_from_bytes(data: bytes, file_name: str = "") -> ExtractionResult:
    """
    从文件内容提取简历文本

    Args:
        data: 文件原始字节
        file_name: 文件名，仅用于日志

    Returns:
        ExtractionResult，文本为空也视为失败
    """
    file_type = detect_file_type(data)
    logger.debug("简历类型识别: file={}, type={}", file_name, file_type)

    if file_type == "unknown":
        return ExtractionResult(
            success=False,
            file_type=file_type,
            error="不支持的文件类型，仅支持 PDF、DOC、DOCX 和 TXT",
        )

    try:
        if file_type == "pdf":
            text = _extract_pdf(data)
        elif file_type in ("docx", "doc"):
            # 旧版 .doc 为 OLE 格式，python-docx 通常无法解析
            text = _extract_docx(data)
        else:
            text = _extract_txt(data)
    except Exception as e:
        logger.warning("简历文本提取失败: file={}, type={}, error={}", file_name, file_type, e)
        error = "旧版 .doc 格式无法解析，请转换为 DOCX 或 PDF" if file_type == "doc" else f"无法读取 {file_type.upper()} 文件"
        return ExtractionResult(success=False, file_type=file_type, error=error)

    text = text.strip()
    if not text:
        return ExtractionResult(success=False, file_type=file_type, error="文件中没有可读取的文本")

    logger.info("简历文本提取成功: file={}, type={}, length={}", file_name, file_type, len(text))
    return ExtractionResult(success=True, text=text, file_type=file_type)


# ==================== 联系方式与经验 ====================

def extract_email(text: str) -> Optional[str]:
    match = EMAIL_PATTERN.search(text or "")
    return match.group().lower() if match else None


def extract_phone(text: str) -> Optional[str]:
    match = PHONE_PATTERN.search(text or "")
    return match.group().strip() if match else None


def extract_experience_years(text: str) -> int:
    """从简历中取最大的 "N years experience" 数值，找不到时为 0"""
    years = [int(m) for m in EXPERIENCE_PATTERN.findall(text or "")]
    return max(years) if years else 0


def detect_skills(text: str, known_skills: List[str]) -> List[str]:
    """已知技能中在简历里出现过的，保持原有顺序与写法"""
    lowered = (text or "").lower()
    return [skill for skill in known_skills if skill.lower() in lowered]


def name_from_filename(file_name: str) -> Tuple[str, str]:
    """
    从文件名推断姓名，如 john_doe-resume.pdf -> ("John", "Doe")
    """
    stem = Path(file_name).stem
    parts = [p for p in re.split(r"[-_\s]+", stem) if p and p.isalpha()]
    parts = [p for p in parts if p.lower() not in ("resume", "cv")]
    if not parts:
        return "Unknown", "Candidate"
    first = parts[0].capitalize()
    last = " ".join(p.capitalize() for p in parts[1:]) or ""
    return first, last
