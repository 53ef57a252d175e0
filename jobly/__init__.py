from .db.session import DbSession
from .models import CompanyRepository, JobRepository

__all__ = ["CompanyRepository", "DbSession", "JobRepository"]
