"""
Service Layer per il Catalogo
Progetto: Bengkel Manager (Gestionale Officina)

Gestione di servizi, ricambi e pacchetti (con composizione ricambi)
e lettura degli articoli per la composizione delle fatture.
"""

import logging
import uuid
from typing import Any, Generic, Iterable, Optional, Type, TypeVar, Union

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bengkel.core.exceptions import ConflictError, NotFoundError
from bengkel.models import ItemKind, Package, PackageSparepart, Service, Sparepart
from bengkel.schemas.catalog import BundleEntry, PackageCreate, PackageUpdate

logger = logging.getLogger(__name__)

CatalogModel = TypeVar("CatalogModel", Service, Sparepart, Package)


class CatalogService(Generic[CatalogModel]):
    """
    CRUD comune agli articoli di catalogo.

    Le liste sono ordinate per nome. Le eliminazioni di articoli già
    usati in fattura vengono rifiutate dal database (FK RESTRICT)
    e riportate come ConflictError.
    """

    model: Type[CatalogModel]
    label: str = "Articolo"

    async def get_all(
        self,
        db: AsyncSession,
        search: Optional[str] = None,
    ) -> list[CatalogModel]:
        query = select(self.model)
        if search:
            query = query.where(self.model.name.ilike(f"%{search}%"))
        result = await db.execute(query.order_by(self.model.name.asc()))
        return list(result.scalars().all())

    async def get_by_id(self, db: AsyncSession, item_id: uuid.UUID) -> CatalogModel:
        """
        Recupera un articolo tramite ID.

        Raises:
            NotFoundError: Se l'articolo non esiste
        """
        result = await db.execute(select(self.model).where(self.model.id == item_id))
        item = result.scalar_one_or_none()

        if item is None:
            logger.warning(f"{self.label} non trovato: {item_id}")
            raise NotFoundError(f"{self.label} con ID {item_id} non trovato")

        return item

    async def create(self, db: AsyncSession, data: Any) -> CatalogModel:
        item = self.model(**data.model_dump())
        db.add(item)
        await db.flush()
        await db.refresh(item)

        logger.info(f"Creato {self.label.lower()}: {item.id} - {item.name}")
        return item

    async def update(
        self,
        db: AsyncSession,
        item_id: uuid.UUID,
        data: Any,
    ) -> CatalogModel:
        item = await self.get_by_id(db, item_id)

        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(item, field, value)

        await db.flush()
        await db.refresh(item)

        logger.info(f"Aggiornato {self.label.lower()}: {item.id}")
        return item

    async def delete(self, db: AsyncSession, item_id: uuid.UUID) -> None:
        """
        Elimina un articolo.

        Raises:
            NotFoundError: Se l'articolo non esiste
            ConflictError: Se l'articolo è presente in almeno una fattura
        """
        item = await self.get_by_id(db, item_id)

        try:
            await db.delete(item)
            await db.flush()
        except IntegrityError as e:
            await db.rollback()
            logger.warning(f"{self.label} {item_id} in uso, eliminazione rifiutata: {e.orig}")
            raise ConflictError(
                f"{self.label} utilizzato in una o più fatture: impossibile eliminarlo"
            )

        logger.info(f"Eliminato {self.label.lower()}: {item_id}")


class ServiceCatalog(CatalogService[Service]):
    model = Service
    label = "Servizio"


class SparepartCatalog(CatalogService[Sparepart]):
    model = Sparepart
    label = "Ricambio"


class PackageCatalog(CatalogService[Package]):
    """
    Pacchetti con ricambi inclusi.

    La composizione viene sempre sostituita per intero, nella stessa
    transazione della riga pacchetto.
    """

    model = Package
    label = "Pacchetto"

    async def _build_bundle(
        self,
        db: AsyncSession,
        entries: Iterable[BundleEntry],
    ) -> list[PackageSparepart]:
        """Verifica i ricambi e costruisce le righe di composizione."""
        entries = list(entries)
        if not entries:
            return []

        ids = {entry.sparepart_id for entry in entries}
        result = await db.execute(select(Sparepart).where(Sparepart.id.in_(ids)))
        spareparts = {sp.id: sp for sp in result.scalars().all()}

        missing = ids - spareparts.keys()
        if missing:
            logger.warning(f"Ricambi non trovati per il pacchetto: {missing}")
            raise NotFoundError(
                f"Ricambi non trovati: {', '.join(str(m) for m in sorted(missing, key=str))}"
            )

        return [
            PackageSparepart(
                sparepart_id=entry.sparepart_id,
                sparepart=spareparts[entry.sparepart_id],
                quantity=entry.quantity,
            )
            for entry in entries
        ]

    async def create(self, db: AsyncSession, data: PackageCreate) -> Package:
        bundle = await self._build_bundle(db, data.spareparts)

        package = Package(**data.model_dump(exclude={"spareparts"}))
        package.bundle.extend(bundle)
        db.add(package)
        await db.flush()
        await db.refresh(package)

        logger.info(
            f"Creato pacchetto: {package.id} - {package.name} ({len(bundle)} ricambi)"
        )
        return package

    async def update(
        self,
        db: AsyncSession,
        item_id: uuid.UUID,
        data: PackageUpdate,
    ) -> Package:
        package = await self.get_by_id(db, item_id)

        for field, value in data.model_dump(
            exclude_unset=True, exclude={"spareparts"}
        ).items():
            setattr(package, field, value)

        if data.spareparts is not None:
            bundle = await self._build_bundle(db, data.spareparts)
            # Le vecchie righe vanno rimosse prima di inserire le nuove
            # (vincolo unique pacchetto/ricambio)
            package.bundle.clear()
            await db.flush()
            package.bundle.extend(bundle)

        await db.flush()
        await db.refresh(package)

        logger.info(f"Aggiornato pacchetto: {package.id}")
        return package

    async def get_bundle(
        self,
        db: AsyncSession,
        package_id: uuid.UUID,
    ) -> list[PackageSparepart]:
        """Righe di composizione di un pacchetto, con ricambio caricato."""
        result = await db.execute(
            select(PackageSparepart).where(PackageSparepart.package_id == package_id)
        )
        return list(result.scalars().all())


service_catalog = ServiceCatalog()
sparepart_catalog = SparepartCatalog()
package_catalog = PackageCatalog()

CATALOGS: dict[ItemKind, CatalogService] = {
    ItemKind.SERVICE: service_catalog,
    ItemKind.SPAREPART: sparepart_catalog,
    ItemKind.PACKAGE: package_catalog,
}


async def get_catalog_item(
    db: AsyncSession,
    item_kind: Union[ItemKind, str],
    item_id: uuid.UUID,
) -> Union[Service, Sparepart, Package]:
    """
    Recupera un articolo di qualsiasi catalogo.

    Raises:
        NotFoundError: Se l'articolo non esiste
    """
    return await CATALOGS[ItemKind(item_kind)].get_by_id(db, item_id)


async def get_catalog_items(
    db: AsyncSession,
    refs: Iterable[tuple[ItemKind, uuid.UUID]],
) -> dict[tuple[ItemKind, uuid.UUID], Any]:
    """
    Carica in blocco gli articoli referenziati, una query per catalogo.

    Le chiavi mancanti nel risultato indicano articoli inesistenti.
    """
    by_kind: dict[ItemKind, set[uuid.UUID]] = {}
    for kind, item_id in refs:
        by_kind.setdefault(ItemKind(kind), set()).add(item_id)

    found: dict[tuple[ItemKind, uuid.UUID], Any] = {}
    for kind, ids in by_kind.items():
        model = CATALOGS[kind].model
        result = await db.execute(select(model).where(model.id.in_(ids)))
        for item in result.scalars().all():
            found[(kind, item.id)] = item
    return found
