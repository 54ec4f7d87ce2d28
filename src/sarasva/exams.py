"""Exam chapter progress and revision priority."""
from sarasva.analytics import round_half_up
from sarasva.models import Chapter, Exam, ExamSubject

ATTENTION_THRESHOLD = 40


def overall_progress(chapter: Chapter) -> int:
    return round_half_up((chapter.theory_progress + chapter.practice_progress) / 2)


def priority_score(chapter: Chapter) -> int:
    """Urgency of revising a chapter: low completion times high weight."""
    return round_half_up((100 - overall_progress(chapter)) * chapter.weightage)


def subject_progress(exam_subject: ExamSubject) -> dict:
    chapters = exam_subject.chapters
    if not chapters:
        return {"theory": 0, "practice": 0, "overall": 0, "all_done": False, "chapters": 0}
    n = len(chapters)
    theory = round_half_up(sum(c.theory_progress for c in chapters) / n)
    practice = round_half_up(sum(c.practice_progress for c in chapters) / n)
    return {
        "theory": theory,
        "practice": practice,
        "overall": round_half_up(sum(overall_progress(c) for c in chapters) / n),
        "all_done": all(c.theory_progress >= 100 and c.practice_progress >= 100 for c in chapters),
        "chapters": n,
    }


def exam_progress(exam: Exam) -> int:
    """Mean overall progress across every chapter of the exam."""
    chapters = [c for s in exam.subjects for c in s.chapters]
    if not chapters:
        return 0
    return round_half_up(sum(overall_progress(c) for c in chapters) / len(chapters))


def needs_attention(exams: list[Exam], threshold: int = ATTENTION_THRESHOLD) -> list[dict]:
    """Chapters scoring above ``threshold`` across the given exams, most urgent first."""
    results = []
    for exam in exams:
        for subj in exam.subjects:
            for ch in subj.chapters:
                score = priority_score(ch)
                if score > threshold:
                    results.append({
                        "exam_id": exam.id,
                        "exam_name": exam.name,
                        "subject_id": subj.subject_id,
                        "chapter_id": ch.id,
                        "chapter_name": ch.name,
                        "overall_progress": overall_progress(ch),
                        "score": score,
                    })
    results.sort(key=lambda r: r["score"], reverse=True)
    return results
