"""
批量简历筛选

逐份处理上传的简历：提取文本、识别联系方式与年限、计算匹配分，
生成批量候选人记录。处理进度写入内存进度缓存供前端轮询。
"""
from typing import List, Optional, Tuple

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.progress_cache import progress_cache
from app.crud import bulk_job_crud, bulk_candidate_crud
from app.models.application import MatchResult
from app.models.base import utc_now
from app.models.bulk import BulkJob, BulkJobStatus
from app.models.job import Job
from app.services import resume_extractor
from app.services.agents import resume_matcher
from app.services.agents.resume_matcher import CandidateProfile, JobRequirements, MatchingError

# (文件名, 文件内容)
UploadedFile = Tuple[str, bytes]


async def match_resume(
    profile: CandidateProfile,
    requirements: JobRequirements,
    api_key: Optional[str],
) -> MatchResult:
    """有密钥时走 AI 匹配，失败或无密钥时使用规则匹配"""
    if api_key:
        try:
            return await resume_matcher.calculate_resume_job_match(profile, requirements, api_key)
        except MatchingError as e:
            logger.warning("AI 匹配失败，改用规则匹配: {}", e)
    return resume_matcher.calculate_basic_match(profile, requirements)


async def process_file(
    db: AsyncSession,
    bulk_job: BulkJob,
    job: Job,
    file_name: str,
    data: bytes,
    api_key: Optional[str],
) -> Optional[int]:
    """
    处理单份简历

    Returns:
        匹配分；文本提取失败时返回 None
    """
    extraction = resume_extractor.extract_text_from_bytes(data, file_name)
    if not extraction.success:
        logger.warning("跳过无法解析的简历: file={}, error={}", file_name, extraction.error)
        return None

    text = extraction.text
    first_name, last_name = resume_extractor.name_from_filename(file_name)
    skills = resume_extractor.detect_skills(text, job.skill_list)
    experience = resume_extractor.extract_experience_years(text)

    match = await match_resume(
        CandidateProfile(skills=skills, experience=experience, resume_text=text),
        JobRequirements.from_job(job),
        api_key,
    )

    await bulk_candidate_crud.create(db, obj_in={
        "bulk_job_id": bulk_job.id,
        "file_name": file_name,
        "first_name": first_name,
        "last_name": last_name,
        "email": resume_extractor.extract_email(text),
        "phone": resume_extractor.extract_phone(text),
        "resume_text": text,
        "skills": skills,
        "experience": experience,
        "matching_score": match.matching_score,
        "skills_match": match.skills_match,
        "experience_match": match.experience_match,
        "analysis": match.analysis,
        "processed_at": utc_now(),
    })
    return match.matching_score


async def run_bulk_job(
    db: AsyncSession,
    bulk_job: BulkJob,
    job: Job,
    files: List[UploadedFile],
    api_key: Optional[str] = None,
) -> BulkJob:
    """顺序处理全部文件，单个文件失败不影响其余文件"""
    progress_cache.start(bulk_job.id, len(files))
    processed = 0
    qualified = 0

    try:
        for file_name, data in files:
            progress_cache.update(bulk_job.id, current_file=file_name)
            try:
                score = await process_file(db, bulk_job, job, file_name, data, api_key)
                if score is not None and score >= settings.qualification_threshold:
                    qualified += 1
            except Exception as e:
                logger.error("处理简历失败: file={}, error={}", file_name, e)
            processed += 1
            progress_cache.update(bulk_job.id, processed=processed, qualified=qualified)

        bulk_job = await bulk_job_crud.update(db, db_obj=bulk_job, obj_in={
            "processed_files": processed,
            "qualified_candidates": qualified,
            "status": BulkJobStatus.COMPLETED.value,
            "completed_at": utc_now(),
        })
    except Exception as e:
        logger.exception("批量筛选任务失败: bulk_job_id={}", bulk_job.id)
        bulk_job = await bulk_job_crud.update(db, db_obj=bulk_job, obj_in={
            "processed_files": processed,
            "qualified_candidates": qualified,
            "status": BulkJobStatus.FAILED.value,
            "error_message": str(e),
            "completed_at": utc_now(),
        })
    finally:
        # 结果已写入数据库，之后的进度查询直接读表
        progress_cache.remove(bulk_job.id)

    logger.info(
        "批量筛选完成: bulk_job_id={}, processed={}, qualified={}",
        bulk_job.id, processed, qualified,
    )
    return bulk_job
