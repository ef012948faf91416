import pytest

from src.models.base import ProgressStatus
from src.services.course_service import CourseService
from src.services.progress_service import ProgressService, completion_percentage, next_status
from src.utils.errors import DegenerateCourseError, ForbiddenError, NotFoundError


@pytest.mark.parametrize(
    "completed,total,expected",
    [(0, 5, 0), (1, 3, 33), (2, 3, 67), (3, 3, 100), (1, 2, 50), (1, 8, 13), (7, 8, 88)],
)
def test_completion_percentage_rounds_half_up(completed, total, expected):
    assert completion_percentage(completed, total) == expected


def test_completion_percentage_without_subtopics_is_an_error():
    with pytest.raises(DegenerateCourseError):
        completion_percentage(0, 0)


def test_next_status_only_moves_forward():
    assert next_status("All", 0) == ProgressStatus.ALL
    assert next_status("All", 33) == ProgressStatus.PENDING
    assert next_status("Pending", 100) == ProgressStatus.COMPLETED
    assert next_status("Completed", 50) == ProgressStatus.COMPLETED
    assert next_status("Pending", 0) == ProgressStatus.PENDING


@pytest.fixture
def enrolled_setup(db, user_factory, course_factory):
    instructor = user_factory(role="Instructor")
    course = course_factory(instructor, [["00:10:00", "00:05:00"], ["00:20:00"]])
    student = user_factory(enrolled=[course["id"]])
    return instructor, student, course


def test_first_completion_is_pending_with_33_percent(db, enrolled_setup):
    _, student, course = enrolled_setup
    progress = ProgressService(db).mark_subtopic_complete(student["_id"], course["id"], course["subtopics"][0])

    assert progress["progressPercentage"] == 33
    assert progress["status"] == "Pending"
    assert progress["completedSubTopics"] == [course["subtopics"][0]]


def test_marking_same_subtopic_twice_is_idempotent(db, enrolled_setup):
    _, student, course = enrolled_setup
    service = ProgressService(db)
    first = service.mark_subtopic_complete(student["_id"], course["id"], course["subtopics"][1])
    second = service.mark_subtopic_complete(student["_id"], course["id"], course["subtopics"][1])

    assert first == second
    assert db["course_progress"].count_documents({"userId": student["_id"]}) == 1


def test_completing_every_subtopic_completes_the_course(db, enrolled_setup):
    _, student, course = enrolled_setup
    service = ProgressService(db)
    for sub_id in course["subtopics"]:
        progress = service.mark_subtopic_complete(student["_id"], course["id"], sub_id)

    assert progress["progressPercentage"] == 100
    assert progress["status"] == "Completed"
    assert sorted(progress["completedSubTopics"]) == sorted(course["subtopics"])


def test_status_stays_completed_when_course_grows(db, user_factory, course_factory):
    instructor = user_factory(role="Instructor")
    course = course_factory(instructor, [["00:10:00"]])
    student = user_factory(enrolled=[course["id"]])
    service = ProgressService(db)

    done = service.mark_subtopic_complete(student["_id"], course["id"], course["subtopics"][0])
    assert done["status"] == "Completed"

    courses = CourseService(db)
    extra = [
        courses.add_subtopic(instructor, course["topics"][0], {
            "videoUrl": f"https://cdn.test/extra{i}.mp4",
            "title": f"Extra {i}",
            "description": "Added later",
            "videoPlaybackTime": "00:01:00",
        })["id"]
        for i in range(2)
    ]
    progress = service.mark_subtopic_complete(student["_id"], course["id"], extra[0])

    assert progress["progressPercentage"] == 67
    assert progress["status"] == "Completed"


def test_student_must_be_enrolled(db, user_factory, course_factory):
    instructor = user_factory(role="Instructor")
    course = course_factory(instructor, [["00:10:00"]])
    outsider = user_factory()

    with pytest.raises(ForbiddenError):
        ProgressService(db).mark_subtopic_complete(outsider["_id"], course["id"], course["subtopics"][0])
    assert db["course_progress"].count_documents({}) == 0


def test_subtopic_from_another_course_is_not_found(db, user_factory, course_factory):
    instructor = user_factory(role="Instructor")
    course = course_factory(instructor, [["00:10:00"]])
    other = course_factory(instructor, [["00:05:00"]])
    student = user_factory(enrolled=[course["id"]])

    with pytest.raises(NotFoundError):
        ProgressService(db).mark_subtopic_complete(student["_id"], course["id"], other["subtopics"][0])


def test_course_without_subtopics_is_degenerate(db, user_factory, course_factory):
    instructor = user_factory(role="Instructor")
    course = course_factory(instructor, [[]])
    student = user_factory(enrolled=[course["id"]])

    with pytest.raises(DegenerateCourseError):
        ProgressService(db).mark_subtopic_complete(student["_id"], course["id"], "000000000000000000000000")


def test_unknown_course_is_not_found(db, user_factory):
    student = user_factory()
    with pytest.raises(NotFoundError):
        ProgressService(db).mark_subtopic_complete(student["_id"], "000000000000000000000000", "x")


def test_get_progress_defaults_before_any_completion(db, enrolled_setup):
    _, student, course = enrolled_setup
    progress = ProgressService(db).get_progress(student["_id"], course["id"])

    assert progress["progressPercentage"] == 0
    assert progress["status"] == "All"
    assert progress["completedSubTopics"] == []


def test_enrolled_course_listing_includes_progress(db, enrolled_setup):
    _, student, course = enrolled_setup
    service = ProgressService(db)
    service.mark_subtopic_complete(student["_id"], course["id"], course["subtopics"][0])

    listing = service.list_enrolled_courses(student["_id"])
    assert len(listing) == 1
    assert listing[0]["id"] == course["id"]
    assert listing[0]["totalDuration"] == "00:35:00"
    assert listing[0]["progressPercentage"] == 33
    assert listing[0]["status"] == "Pending"


def test_enrolled_course_detail_requires_enrollment(db, user_factory, course_factory):
    instructor = user_factory(role="Instructor")
    course = course_factory(instructor, [["00:10:00"]])
    outsider = user_factory()

    with pytest.raises(ForbiddenError):
        ProgressService(db).get_enrolled_course(outsider["_id"], course["id"])


class _InterleavedCollection:
    """Colección que corre `between` justo después del primer $addToSet."""

    def __init__(self, col, between):
        self._col = col
        self._between = between

    def __getattr__(self, name):
        return getattr(self._col, name)

    def find_one_and_update(self, filter, update, *args, **kwargs):
        result = self._col.find_one_and_update(filter, update, *args, **kwargs)
        if "$addToSet" in update and self._between is not None:
            between, self._between = self._between, None
            between()
        return result


def test_interleaved_completions_never_regress(db, user_factory, course_factory):
    instructor = user_factory(role="Instructor")
    course = course_factory(instructor, [["00:10:00", "00:05:00"]])
    student = user_factory(enrolled=[course["id"]])
    first_sub, second_sub = course["subtopics"]

    slow, fast = ProgressService(db), ProgressService(db)
    slow.repo.col = _InterleavedCollection(
        slow.repo.col,
        lambda: fast.mark_subtopic_complete(student["_id"], course["id"], second_sub),
    )
    returned = slow.mark_subtopic_complete(student["_id"], course["id"], first_sub)

    stored = db["course_progress"].find_one({"userId": student["_id"]})
    assert sorted(stored["completedSubTopics"]) == sorted([first_sub, second_sub])
    assert stored["progressPercentage"] == 100
    assert stored["status"] == "Completed"
    assert returned["status"] == "Completed"
