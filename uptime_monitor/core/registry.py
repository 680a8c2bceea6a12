"""Site registry: registration, lookup, atomic deletion and the log store writer."""

from typing import Any, List

from sqlalchemy import delete, insert, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from uptime_monitor.core.exceptions import (
    DuplicateAliasError,
    SiteNotFoundError,
    SiteValidationError,
    StorageError,
)
from uptime_monitor.core.validation import validate_site
from uptime_monitor.models.log import Log
from uptime_monitor.models.website import Website
from uptime_monitor.utils.logger import get_logger
from uptime_monitor.utils.timeutils import utcnow

logger = get_logger(__name__, component="registry")


async def execute_statement(db: AsyncSession, statement: Any, action: str):
    """
    Execute a statement, converting driver failures into StorageError.

    Args:
        db: Database session
        statement: SQLAlchemy statement
        action: Short description used in the error message

    Returns:
        Result: SQLAlchemy result
    """
    try:
        return await db.execute(statement)
    except SQLAlchemyError as e:
        raise StorageError(f"Failed to {action}: {e.__class__.__name__}") from e


class SiteRegistry:
    """
    Durable registry of monitored sites.

    Every read goes to storage; nothing is cached between calls. Writes are
    committed (or rolled back) before a method returns.
    """

    def __init__(self, db: AsyncSession):
        """
        Initialize site registry.

        Args:
            db: Database session
        """
        self.db = db

    async def add_site(self, url: str, alias: str) -> Website:
        """
        Validate and register a new site.

        Args:
            url: Absolute URL to probe
            alias: Unique external identifier

        Returns:
            Website: The persisted site

        Raises:
            SiteValidationError: If url or alias is malformed
            DuplicateAliasError: If the alias is taken
            StorageError: On any other persistence failure
        """
        result = validate_site(url, alias)
        if not result.is_valid:
            logger.info(
                "Rejected site registration",
                extra={"alias": alias, "errors": result.errors}
            )
            raise SiteValidationError(result.errors)

        existing = await execute_statement(
            self.db,
            select(Website.id).where(Website.alias == alias),
            f"look up site '{alias}'"
        )
        if existing.scalar_one_or_none() is not None:
            raise DuplicateAliasError(alias)

        website = Website(url=url, alias=alias)
        self.db.add(website)
        try:
            await self.db.commit()
        except IntegrityError as e:
            # Lost a race with a concurrent insert of the same alias
            await self.db.rollback()
            raise DuplicateAliasError(alias) from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StorageError(f"Failed to insert site '{alias}': {e.__class__.__name__}") from e

        await self.db.refresh(website)

        logger.info(
            "Registered site",
            extra={"website_id": website.id, "alias": alias, "url": url}
        )

        return website

    async def list_sites(self) -> List[Website]:
        """
        List all registered sites.

        Returns:
            list[Website]: Sites in registration order
        """
        result = await execute_statement(
            self.db,
            select(Website).order_by(Website.id),
            "list sites"
        )
        return list(result.scalars().all())

    async def get_site(self, alias: str) -> Website:
        """
        Get a site by alias.

        Raises:
            SiteNotFoundError: If no site uses this alias
        """
        result = await execute_statement(
            self.db,
            select(Website).where(Website.alias == alias),
            f"look up site '{alias}'"
        )
        website = result.scalar_one_or_none()

        if website is None:
            raise SiteNotFoundError(alias)

        return website

    async def delete_site(self, alias: str) -> None:
        """
        Delete a site and all of its logs in one transaction.

        Logs are removed first, then the site row; both statements share a
        single transaction so readers see either everything or nothing.

        Raises:
            SiteNotFoundError: If no site uses this alias
            StorageError: If either delete fails; nothing is removed
        """
        try:
            website = await self.get_site(alias)
            website_id = website.id

            logs_result = await execute_statement(
                self.db,
                delete(Log).where(Log.website_id == website_id),
                f"delete logs of '{alias}'"
            )
            await execute_statement(
                self.db,
                delete(Website).where(Website.id == website_id),
                f"delete site '{alias}'"
            )

            try:
                await self.db.commit()
            except SQLAlchemyError as e:
                raise StorageError(f"Failed to commit deletion of '{alias}': {e.__class__.__name__}") from e
        except (SiteNotFoundError, StorageError):
            await self.db.rollback()
            raise

        logger.info(
            "Deleted site",
            extra={
                "website_id": website_id,
                "alias": alias,
                "logs_deleted": logs_result.rowcount
            }
        )

    async def append_log(self, alias: str, status_code: int) -> None:
        """
        Append one probe result for a site.

        The site is resolved by alias inside the INSERT itself, so a site
        deleted after the probe was sent makes the insert fail.

        Args:
            alias: Alias of the probed site
            status_code: HTTP status code of the response

        Raises:
            StorageError: If the site no longer exists or the insert fails
        """
        website_id = select(Website.id).where(Website.alias == alias).scalar_subquery()

        try:
            await execute_statement(
                self.db,
                insert(Log).values(
                    website_id=website_id,
                    status=status_code,
                    created_at=utcnow()
                ),
                f"insert log status for '{alias}'"
            )
            await self.db.commit()
        except StorageError:
            await self.db.rollback()
            raise
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StorageError(f"Failed to commit log status for '{alias}': {e.__class__.__name__}") from e

        logger.debug(
            "Recorded probe status",
            extra={"alias": alias, "status_code": status_code}
        )
