from .company import CompanyRepository
from .job import JobRepository

__all__ = ["CompanyRepository", "JobRepository"]
