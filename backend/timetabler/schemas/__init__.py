from timetabler.schemas.timetable import (  # noqa: F401
    BATCH_VALUES,
    DAYS_OF_WEEK,
    DEFAULT_TIME_SLOTS,
    Batch,
    Classroom,
    Course,
    Day,
    ScheduleEntry,
    Teacher,
    TimeSlot,
    Timetable,
    ValidationError,
    ViolationType,
)
from timetabler.schemas.generator import (  # noqa: F401
    CourseShortfall,
    GenerationSettings,
    TeacherLoad,
)
