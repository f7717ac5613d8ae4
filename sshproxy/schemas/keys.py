from pathlib import Path

from pydantic import BaseModel, ConfigDict


class KeyBundle(BaseModel):
    """Response body of create_pair: private key with the certificate line embedded."""
    model_config = ConfigDict(frozen=True)

    content: str
    certificate: str

class KeyFiles(BaseModel):
    private_key: Path
    certificate: Path
    public_key: Path
