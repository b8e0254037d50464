# module jobpost.posts.models
"""
Enregistrements écrits par l'ingestion (lot + offres).

Les types sont volontairement permissifs: un enregistrement peut contenir des
valeurs invalides, c'est le validateur qui produit les erreurs. Les alias
correspondent aux noms des champs du formulaire, qui servent aussi de clés
dans la ValidationErrorMap.
"""
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

# {"email": "...", "posts[1].applyEmail": "...", "other": "..."}
ValidationErrorMap = Dict[str, str]


class BatchSubmission(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    contact_email: Optional[str] = Field(default=None, alias="email")
    website_url: Optional[str] = Field(default=None, alias="website")
    company_name: Optional[str] = Field(default=None, alias="name")
    company_description: Optional[str] = Field(default=None, alias="description")
    logo_url: Optional[str] = Field(default=None, alias="logo")
    brand_color: Optional[str] = Field(default=None, alias="color")
    expires_after_days: Optional[int] = Field(default=None, alias="expiresAfter")
    currency_code: Optional[str] = Field(default=None, alias="currency")
    post_count: int = Field(default=0, alias="postCount")
    # Nombre d'index posts[i] réellement présents dans le formulaire
    posts_found: Optional[int] = Field(default=None, alias="postsFound")


class PostEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    index: int
    title: Optional[str] = None
    job_type: Optional[str] = Field(default=None, alias="type")
    location: Optional[str] = None
    salary_start: Optional[int] = Field(default=None, alias="salaryStart")
    salary_end: Optional[int] = Field(default=None, alias="salaryEnd")
    apply_link: Optional[str] = Field(default=None, alias="applyLink")
    apply_email: Optional[str] = Field(default=None, alias="applyEmail")
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
