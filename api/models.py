"""
Pydantic models for API request and response validation.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class OutputFormat(str, Enum):
    PDF = "pdf"
    DOCX = "docx"


class RenderRequest(BaseModel):
    """Request model for /parse and /render endpoints."""
    text: str = Field(
        ...,
        max_length=200_000,
        description="النص المستخرج بالعربية",
        examples=["# المقدمة\n- البند الأول\n## بيانات منسقي الاتصال\nالاسم: أحمد"]
    )
    format: OutputFormat = Field(
        OutputFormat.PDF,
        description="صيغة الملف الناتج"
    )
    raw: bool = Field(
        False,
        description="تصدير النص سطرًا بسطر دون تحليل"
    )


class ExtractionResponse(BaseModel):
    """Response model for /extract endpoint."""
    text: str = Field(..., description="النص المستخرج من الملف")
    filename: Optional[str] = Field(None, description="اسم الملف المرفوع")


class DocumentResponse(BaseModel):
    """Response model for /parse endpoint."""
    sections: List[Dict[str, Any]] = Field(
        default_factory=list,
        description="الأقسام بالترتيب"
    )
    contacts: List[Dict[str, Optional[str]]] = Field(
        default_factory=list,
        description="بيانات منسقي الاتصال"
    )
    contact_title: Optional[str] = Field(None, description="عنوان قسم الاتصال")
    contact_notes: List[Dict[str, Any]] = Field(
        default_factory=list,
        description="أسطر أخرى داخل قسم الاتصال"
    )
    contact_index: Optional[int] = Field(
        None,
        description="عدد الأقسام التي تسبق قسم الاتصال"
    )


class ErrorResponse(BaseModel):
    """Error response model."""
    error: str = Field(..., description="نوع الخطأ")
    message: str = Field(..., description="تفاصيل الخطأ")
    detail: Optional[str] = Field(None, description="تفاصيل فنية إضافية")
