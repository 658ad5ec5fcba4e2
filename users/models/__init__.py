from .organization import Faculty, Department, Ikohza, Company, CompanyBranch
from .users import User, UserManager
