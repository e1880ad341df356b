import asyncio

import pytest

from resume_tailor.core.exceptions import AIError
from resume_tailor.schemas.customization import (
    BatchJob, BatchResult, CustomizedResume, Explanation, KeywordAnalysis
)
from resume_tailor.services.ai_orchestrator import AIDomain
from resume_tailor.services.batch_processor import (
    extract_common_keywords, generate_batch_comparison, process_batch_optimization
)


def _result(job_id, match, ats, matched, company="Co", role="Dev"):
    return BatchResult(
        job_id=job_id,
        company_name=company,
        role_name=role,
        match_score=match,
        ats_score=ats,
        customized_resume=CustomizedResume(),
        explanation=Explanation(),
        cover_letter="",
        summary="",
        keywords=KeywordAnalysis(matched=matched),
    )


@pytest.fixture
def jobs():
    return [
        BatchJob(id="a", company_name="Initech", role_name="Backend Engineer", description="Python and Django"),
        BatchJob(id="b", company_name="Globex", role_name="Platform Engineer", description="Kubernetes and Python"),
        BatchJob(id="c", company_name="Hooli", role_name="Data Engineer", description="Spark pipelines"),
    ]


@pytest.fixture
def scored_ai(fake_ai):
    """Match score depends on which job description the analysis came from."""
    scores = {"django": 70, "kubernetes": 91, "spark": 55}

    def analysis(user_content):
        words = [w for w in scores if w in user_content.lower()]
        return {"required_skills": words, "nice_to_have_skills": [], "responsibilities": [],
                "keywords": words, "soft_skills": []}

    def match(user_content):
        score = next(s for word, s in scores.items() if word in user_content)
        return {"overall_match": score, "strengths": [], "gaps": [],
                "skill_overlap": score, "experience_relevance": score, "keyword_alignment": score}

    fake_ai.responses[AIDomain.JOB] = analysis
    fake_ai.responses[AIDomain.MATCH] = match
    return fake_ai


def test_batch_results_sorted_by_match(scored_ai, parsed_resume, jobs):
    results = asyncio.run(process_batch_optimization(parsed_resume, jobs, "modern"))

    assert [r.job_id for r in results] == ["b", "a", "c"]
    assert [r.match_score for r in results] == [91, 70, 55]
    assert results[0].summary == "Customized for Globex - Platform Engineer position with 91% match score"
    assert results[0].cover_letter.startswith("Dear Hiring Manager")
    assert results[0].customized_resume.skills == parsed_resume.skills
    assert results[0].ats_score == 87


def test_batch_runs_full_pipeline_per_job(scored_ai, parsed_resume, jobs):
    asyncio.run(process_batch_optimization(parsed_resume, jobs))
    for domain in (AIDomain.JOB, AIDomain.MATCH, AIDomain.CUSTOMIZATION, AIDomain.COVER_LETTER, AIDomain.ATS):
        assert scored_ai.calls.count(domain) == len(jobs)


def test_batch_failure_propagates(scored_ai, parsed_resume, jobs):
    scored_ai.texts[AIDomain.COVER_LETTER] = ""
    with pytest.raises(AIError, match="Failed to generate cover letter"):
        asyncio.run(process_batch_optimization(parsed_resume, jobs))


def test_comparison_of_ranked_results():
    results = [
        _result("b", 91, 80, [], company="Globex", role="Platform"),
        _result("a", 70, 90, []),
        _result("c", 55, 70, [], company="Hooli", role="Data"),
    ]
    comparison = generate_batch_comparison(results)

    assert comparison.total_jobs == 3
    assert comparison.average_match_score == pytest.approx(72)
    assert comparison.average_ats_score == pytest.approx(80)
    assert comparison.best_match.company == "Globex"
    assert comparison.best_match.score == 91
    assert comparison.worst_match.company == "Hooli"
    assert comparison.score_range == {"min": 55, "max": 91}


def test_comparison_of_nothing():
    assert generate_batch_comparison([]) is None


def test_common_keywords_buckets():
    results = [
        _result("1", 90, 90, ["python", "sql", "docker", "aws"]),
        _result("2", 80, 80, ["python", "sql", "docker"]),
        _result("3", 70, 70, ["python", "sql", "go"]),
        _result("4", 60, 60, ["python", "aws"]),
    ]
    keywords = extract_common_keywords(results)

    assert keywords.universal == ["python"]
    # ceil(4 * 0.5) == 2 jobs needed to be frequent
    assert keywords.frequent == ["sql", "docker", "aws"]
    assert keywords.rare == ["go"]


def test_common_keywords_rare_is_capped_at_ten():
    results = [
        _result("1", 90, 90, ["shared"] + [f"only1-{i}" for i in range(8)]),
        _result("2", 80, 80, ["shared"] + [f"only2-{i}" for i in range(8)]),
        _result("3", 70, 70, ["shared", "pair"]),
        _result("4", 60, 60, ["pair"]),
    ]
    keywords = extract_common_keywords(results)
    assert keywords.universal == []
    assert keywords.frequent == ["shared", "pair"]
    assert len(keywords.rare) == 10


def test_common_keywords_empty():
    keywords = extract_common_keywords([])
    assert keywords.universal == keywords.frequent == keywords.rare == []
