from enum import Enum


class ExerciseClass(Enum):
    CORRECT = "A"
    THROWING_ELBOWS = "B"
    LIFTING_HALFWAY = "C"
    LOWERING_HALFWAY = "D"
    THROWING_HIPS = "E"


# Ordering shared by every confusion matrix in a run.
CLASS_LABELS = [c.value for c in ExerciseClass]

SUBJECT_COLUMN = "user_name"
LABEL_COLUMN = "classe"

SENSOR_LOCATIONS = ["belt", "arm", "dumbbell", "forearm"]


def _location_columns(location: str) -> list[str]:
    columns = [f"roll_{location}", f"pitch_{location}", f"yaw_{location}", f"total_accel_{location}"]
    for kind in ("gyros", "accel", "magnet"):
        columns.extend(f"{kind}_{location}_{axis}" for axis in ("x", "y", "z"))
    return columns


SENSOR_COLUMNS = [col for location in SENSOR_LOCATIONS for col in _location_columns(location)]

# Window summaries are only populated on new_window rows.
SUMMARY_PREFIXES = ("kurtosis_", "skewness_", "max_", "min_", "amplitude_", "var_", "avg_", "stddev_")
