from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ChatRequest(BaseModel):
    message: Optional[str] = Field(default=None, description="Question for the Stacks assistant.")


class ChatResponse(BaseModel):
    message: str = Field(..., description="Assistant reply.")


class GenerateContractRequest(BaseModel):
    description: Optional[str] = Field(default=None, description="What the contract should do.")
    features: Optional[List[str]] = Field(default=None, description="Features to include.")


class GeneratedContract(BaseModel):
    code: str = Field(..., description="Generated Clarity source with code fences removed.")


class CodeRequest(BaseModel):
    code: Optional[str] = Field(default=None, description="Clarity source code to analyze.")


class TransactionRequest(BaseModel):
    transaction: Optional[Any] = Field(default=None, description="Transaction object as returned by the explorer.")


class ContractAnalysisRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    source: Optional[str] = Field(default=None, description="Clarity source code of the contract.")
    events: Optional[List[Any]] = Field(default=None, description="Recent contract events.")
    contract_id: Optional[str] = Field(default=None, alias="contractId", description="Contract identifier.")


class DecodeRequest(BaseModel):
    input: Optional[str] = Field(default=None, description="Transaction id (0x...) or contract id (address.name).")
