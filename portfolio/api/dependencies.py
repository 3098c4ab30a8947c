# This file provides dependency factories for FastAPI routes and middleware.
# It exists so the store, AI client, and context cache are created once and shared through injection.
# Entity services are cheap wrappers built per request from the shared config and store.
# Tests override `get_config` and `get_document_store` to swap in a SQLite-backed store.

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from openai import OpenAI

from portfolio.api.api_config import ApiConfig, get_api_config
from portfolio.api.db_access import DocumentStore
from portfolio.api.services.ai_service import AIService, ContextCache
from portfolio.api.services.auth_service import AuthService
from portfolio.api.services.blog_service import BlogService
from portfolio.api.services.catalog_service import ServiceCatalogService
from portfolio.api.services.client_service import ClientService
from portfolio.api.services.contact_service import ContactService
from portfolio.api.services.project_service import ProjectService
from portfolio.api.services.search_service import SearchService
from portfolio.api.services.storage_service import LocalFileStorage
from portfolio.api.services.team_member_service import TeamMemberService
from portfolio.api.services.team_service import TeamService
from portfolio.api.services.testimonial_service import TestimonialService


def get_config() -> ApiConfig:
    return get_api_config()


@lru_cache(maxsize=1)
def get_document_store() -> DocumentStore:
    config = get_api_config()
    return DocumentStore(database_url=config.database_url)


@lru_cache(maxsize=1)
def get_context_cache() -> ContextCache:
    return ContextCache(ttl_seconds=get_api_config().ai_context_ttl_seconds)


@lru_cache(maxsize=1)
def get_openai_client() -> OpenAI | None:
    config = get_api_config()
    if not config.ai_configured:
        return None
    return OpenAI(api_key=config.openai_api_key, base_url=config.openai_base_url)


ConfigDep = Annotated[ApiConfig, Depends(get_config)]
StoreDep = Annotated[DocumentStore, Depends(get_document_store)]


def get_service_catalog(config: ConfigDep, store: StoreDep) -> ServiceCatalogService:
    return ServiceCatalogService(config=config, store=store)


def get_project_service(config: ConfigDep, store: StoreDep) -> ProjectService:
    return ProjectService(config=config, store=store)


def get_client_service(config: ConfigDep, store: StoreDep) -> ClientService:
    return ClientService(config=config, store=store)


def get_team_member_service(config: ConfigDep, store: StoreDep) -> TeamMemberService:
    return TeamMemberService(config=config, store=store)


def get_team_service(config: ConfigDep, store: StoreDep) -> TeamService:
    return TeamService(config=config, store=store)


def get_blog_service(config: ConfigDep, store: StoreDep) -> BlogService:
    return BlogService(config=config, store=store)


def get_testimonial_service(config: ConfigDep, store: StoreDep) -> TestimonialService:
    return TestimonialService(config=config, store=store)


def get_contact_service(config: ConfigDep, store: StoreDep) -> ContactService:
    return ContactService(config=config, store=store)


def get_search_service(config: ConfigDep, store: StoreDep) -> SearchService:
    return SearchService(config=config, store=store)


def get_auth_service(config: ConfigDep, store: StoreDep) -> AuthService:
    return AuthService(config=config, store=store)


def get_file_storage(config: ConfigDep, store: StoreDep) -> LocalFileStorage:
    return LocalFileStorage(config=config, store=store)


def get_ai_service(
    config: ConfigDep,
    store: StoreDep,
    cache: Annotated[ContextCache, Depends(get_context_cache)],
    client: Annotated[OpenAI | None, Depends(get_openai_client)],
) -> AIService:
    return AIService(config=config, store=store, cache=cache, client=client)
