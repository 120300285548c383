"""
Special functions and the Student-t family.

- log-gamma (Lanczos), regularized incomplete beta (Lentz)
- Student-t pdf / cdf / quantile with location and scale
- Inverse-gamma and normal densities
"""

from special.functions import (
    log_gamma,
    reg_inc_beta,
    inverse_gamma_pdf,
    normal_pdf,
)
from special.student_t import (
    StudentT,
    student_t_pdf,
    student_t_cdf,
    student_t_quantile,
)

__all__ = [
    "log_gamma",
    "reg_inc_beta",
    "inverse_gamma_pdf",
    "normal_pdf",
    "StudentT",
    "student_t_pdf",
    "student_t_cdf",
    "student_t_quantile",
]
