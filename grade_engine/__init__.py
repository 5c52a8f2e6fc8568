# -*- coding: utf-8 -*-
from grade_engine.calculator import (
    GRADE_TIER_COLORS,
    CategoryTotals,
    GradeTier,
    aggregate_categories,
    assignment_percentage,
    calculate_overall_average,
    calculate_semester_progress,
    calculate_subject_grade,
    category_percentages,
    grade_color,
    grade_tier,
    round_half_up,
)
from grade_engine.models import (
    MAX_SUBJECTS,
    Assignment,
    Category,
    CategoryWeights,
    Profile,
    SemesterWindow,
    Subject,
)
