"""
Batch optimization: one resume against several job descriptions.

Each job runs the full pipeline (analyze -> match -> customize -> cover
letter -> ATS scan) in a worker thread. All pipelines are joined before the
results are ranked; the first failure propagates to the caller.
"""
import asyncio
import logging
import math
from collections import Counter
from typing import List, Optional

from starlette.concurrency import run_in_threadpool

from resume_tailor.schemas.customization import (
    BatchComparison, BatchJob, BatchResult, CommonKeywords, ScoredRole
)
from resume_tailor.schemas.resume import ParsedResume
from resume_tailor.services.ats_scanner import analyze_ats_compatibility, ats_resume_from_customization
from resume_tailor.services.customizer import customize_resume, generate_cover_letter
from resume_tailor.services.job_analyzer import analyze_job_description
from resume_tailor.services.matcher import calculate_match_score

logger = logging.getLogger(__name__)


def process_batch_job(resume: ParsedResume, job: BatchJob) -> BatchResult:
    """Run the full customization pipeline for a single job description."""
    logger.info(f"Batch job {job.id}: {job.company_name} / {job.role_name}")
    try:
        analysis = analyze_job_description(job.description)
        match = calculate_match_score(resume, analysis)
        customized, explanation = customize_resume(resume, analysis, job.description)
        cover_letter = generate_cover_letter(resume, job.description, job.company_name, job.role_name)
        ats = analyze_ats_compatibility(ats_resume_from_customization(customized), job.description)
    except Exception as e:
        logger.error(f"Error processing batch job {job.id}: {e}")
        raise

    return BatchResult(
        job_id=job.id,
        company_name=job.company_name,
        role_name=job.role_name,
        match_score=match.overall_match,
        ats_score=ats.ats_score,
        customized_resume=customized,
        explanation=explanation,
        cover_letter=cover_letter,
        summary=(
            f"Customized for {job.company_name} - {job.role_name} position "
            f"with {match.overall_match:.0f}% match score"
        ),
        keywords=ats.keyword_analysis,
    )


async def process_batch_optimization(
    resume: ParsedResume,
    jobs: List[BatchJob],
    template_id: str = "classic"
) -> List[BatchResult]:
    """
    Customize the resume for every job concurrently.
    Results are sorted by match score, highest first.
    """
    logger.info(f"Starting batch optimization for {len(jobs)} jobs (template={template_id})")
    results = await asyncio.gather(
        *(run_in_threadpool(process_batch_job, resume, job) for job in jobs)
    )
    return sorted(results, key=lambda r: r.match_score, reverse=True)


def generate_batch_comparison(results: List[BatchResult]) -> Optional[BatchComparison]:
    """Summary metrics for ranked batch results (expects the ordering above)."""
    if not results:
        return None

    best, worst = results[0], results[-1]
    return BatchComparison(
        total_jobs=len(results),
        average_match_score=sum(r.match_score for r in results) / len(results),
        average_ats_score=sum(r.ats_score for r in results) / len(results),
        best_match=ScoredRole(company=best.company_name, role=best.role_name, score=best.match_score),
        worst_match=ScoredRole(company=worst.company_name, role=worst.role_name, score=worst.match_score),
        score_range={"min": worst.match_score, "max": best.match_score},
    )


def extract_common_keywords(results: List[BatchResult]) -> CommonKeywords:
    """
    Bucket matched keywords by how many jobs they appear in:
    universal (every job), frequent (at least half), rare (top 10 of the rest).
    """
    if not results:
        return CommonKeywords()

    counts: Counter = Counter()
    for result in results:
        counts.update(result.keywords.matched)

    total = len(results)
    half = math.ceil(total * 0.5)
    # Counter preserves first-seen order, so sorted() ties stay stable
    by_count = sorted(counts, key=lambda k: counts[k], reverse=True)

    return CommonKeywords(
        universal=[k for k in counts if counts[k] == total],
        frequent=[k for k in by_count if half <= counts[k] < total],
        rare=[k for k in by_count if counts[k] < half][:10],
    )
