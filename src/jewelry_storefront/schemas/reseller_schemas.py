from typing import Optional

from pydantic import BaseModel, EmailStr, Field, model_validator

BUSINESS_TYPES = (
    "jewelry-store",
    "boutique",
    "online-retailer",
    "department-store",
    "wholesaler",
    "other",
)

YEARS_IN_BUSINESS = ("0-1", "1-3", "3-5", "5-10", "10+")

MONTHLY_VOLUMES = ("under-1000", "1000-2500", "2500-5000", "5000-10000", "10000+")


class ResellerApplicationRequest(BaseModel):
    """
    Public reseller form: the business profile plus the credentials for the
    account that will be upgraded on approval.
    """
    company_name: str = Field(min_length=1, max_length=200)
    contact_person: str = Field(min_length=1, max_length=200)
    email: EmailStr
    phone: str = Field(min_length=5, max_length=30)
    business_address: str = Field(min_length=1, max_length=300)
    city: str = Field(min_length=1, max_length=100)
    state: str = Field(min_length=1, max_length=100)
    zip_code: str = Field(min_length=1, max_length=20)
    business_type: str
    years_in_business: str
    tax_id: Optional[str] = Field(default=None, max_length=50)
    website: Optional[str] = Field(default=None, max_length=300)
    expected_monthly_volume: Optional[str] = None
    business_description: Optional[str] = Field(default=None, max_length=2000)
    trade_references: Optional[str] = Field(default=None, max_length=2000)
    password: str = Field(min_length=8, max_length=128)
    confirm_password: str

    @model_validator(mode="after")
    def check_choices_and_passwords(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        if self.business_type not in BUSINESS_TYPES:
            raise ValueError(f"Business type must be one of: {', '.join(BUSINESS_TYPES)}")
        if self.years_in_business not in YEARS_IN_BUSINESS:
            raise ValueError(f"Years in business must be one of: {', '.join(YEARS_IN_BUSINESS)}")
        if self.expected_monthly_volume and self.expected_monthly_volume not in MONTHLY_VOLUMES:
            raise ValueError(f"Expected monthly volume must be one of: {', '.join(MONTHLY_VOLUMES)}")
        return self

    def application_values(self) -> dict:
        """Columns for the application row (credentials excluded)"""
        return self.model_dump(exclude={"password", "confirm_password"})
