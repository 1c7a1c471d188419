# therapal/schemas/payments/invoice.py
# Wire format of the IremboPay invoice API (camelCase on purpose).
from pydantic import BaseModel, Field
from typing import List, Optional


class InvoiceCustomer(BaseModel):
    email: str
    phoneNumber: str
    name: str


class InvoicePaymentItem(BaseModel):
    unitAmount: int = Field(ge=0)
    quantity: int = 1
    code: str


class InvoiceRequest(BaseModel):
    transactionId: str
    paymentAccountIdentifier: str
    customer: InvoiceCustomer
    paymentItems: List[InvoicePaymentItem]
    description: str
    expiryAt: str  # ISO-8601, UTC
    language: str = "EN"


class InvoiceResponseData(BaseModel):
    id: str
    paymentUrl: Optional[str] = None


class InvoiceResponse(BaseModel):
    success: bool
    data: Optional[InvoiceResponseData] = None
    message: Optional[str] = None
