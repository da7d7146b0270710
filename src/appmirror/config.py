# AppMirror — Configuration via Pydantic BaseSettings
# Author: Sachin Chhetri
# Year: 2025
# License: MIT

from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


CHROME_USER_AGENT = (
	"Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
	"(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class Settings(BaseSettings):
	"""Application settings with sane defaults.

	Environment variables are prefixed with APPMIRROR_. CLI flags can override.
	Components take a Settings instance explicitly so tests can swap domains.
	"""

	model_config = SettingsConfigDict(env_prefix="APPMIRROR_", env_file=".env", extra="ignore")

	user_domain: str = Field(default="Yandux.Biz")
	user_scheme: str = Field(default="https")
	source_domain: str = Field(default="apkfab.com")
	user_agent: str = Field(default=CHROME_USER_AGENT)
	connect_timeout: float = Field(default=10.0)
	read_timeout: float = Field(default=20.0)
	retries: int = Field(default=0)
	backoff: float = Field(default=0.5)
	listing_limit: int = Field(default=24)
	suggest_limit: int = Field(default=8)
	search_keyword_max: int = Field(default=40)
	cdn_domains: List[str] = Field(default_factory=lambda: ["winudf.com"])
	log_level: str = Field(default="INFO")
	log_dir: str = Field(default="logs")

	@property
	def source_base_url(self) -> str:
		return f"https://{self.source_domain}"

	@property
	def user_base_url(self) -> str:
		return f"{self.user_scheme}://{self.user_domain}"

	@property
	def default_timeout(self):
		return (self.connect_timeout, self.read_timeout)
