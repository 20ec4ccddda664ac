from sitefront.db.base_class import Base
from sitefront.models.site import Site
from sitefront.models.custom_domain import CustomDomain
