from typing import Dict, Any, Optional, List
from pydantic import BaseModel, ConfigDict, Field

from ..core import MappingSpec


class FtpCredentials(BaseModel):
    host: str
    port: int = 21
    user: str
    password: str


class ConnectionSettings(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ftp_host: str = Field("", alias="ftpHost")
    ftp_port: int = Field(21, alias="ftpPort")
    ftp_user: str = Field("", alias="ftpUser")
    ftp_password: str = Field("", alias="ftpPassword")
    file_path: str = Field("/productdata.json", alias="filePath")
    data_path: str = Field("", alias="dataPath")

    def credentials(self) -> FtpCredentials:
        return FtpCredentials(host=self.ftp_host, port=self.ftp_port or 21, user=self.ftp_user, password=self.ftp_password)


class IntegrationRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    connection_type: str = Field("ftp", alias="connectionType")
    credentials: Optional[ConnectionSettings] = None
    mapping: Dict[str, Any] = Field(default_factory=dict)
    metafield_mappings: List[Dict[str, Any]] = Field(default_factory=list, alias="metafieldMappings")
    sync_frequency: str = Field("24", alias="syncFrequency")

    @classmethod
    def from_spec(cls, spec: MappingSpec, **fields: Any) -> "IntegrationRecord":
        persisted = spec.to_dict()
        return cls(mapping=persisted["mapping"], metafield_mappings=persisted["metafieldMappings"], **fields)

    def to_spec(self) -> MappingSpec:
        return MappingSpec.from_dict({"mapping": self.mapping, "metafieldMappings": self.metafield_mappings})

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class SyncRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    config_id: str = Field(..., alias="configId")


class SyncResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    success: bool = True
    message: Optional[str] = None
    processed_records: Optional[int] = Field(None, alias="processedRecords")


class DeleteResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    success: bool = True
    message: Optional[str] = None
