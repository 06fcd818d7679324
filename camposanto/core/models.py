from __future__ import annotations

from datetime import date, datetime, timezone
from enum import Enum

from flask_login import UserMixin
from sqlalchemy import CheckConstraint, Enum as SAEnum, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from werkzeug.security import generate_password_hash

from camposanto.core.demo_people import generate_demo_names
from camposanto.core.extensions import db


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value: date | datetime | None) -> str | None:
    return value.isoformat() if value else None


class OrganizationType(str, Enum):
    FUNERARIA = "FUNERARIA"
    CEMENTERIO = "CEMENTERIO"


class SiteStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class SpaceStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    RESERVED = "RESERVED"
    OCCUPIED = "OCCUPIED"
    LOCKED = "LOCKED"


class BurialRequestStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    ASSIGNED = "ASSIGNED"


class Organization(db.Model):
    __tablename__ = "organization"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(db.String(120), unique=True, nullable=False)
    code: Mapped[str] = mapped_column(db.String(30), unique=True, nullable=False)
    type: Mapped[OrganizationType] = mapped_column(
        SAEnum(OrganizationType, name="organization_type"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)

    memberships = relationship("Membership", back_populates="organization")
    sites = relationship("CemeterySite", back_populates="organization", order_by="CemeterySite.name")

    def to_dict(self) -> dict[str, object]:
        return {"id": self.id, "name": self.name, "code": self.code, "type": self.type.value}


class User(UserMixin, db.Model):
    __tablename__ = "user_account"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(db.String(255), unique=True, nullable=False)
    full_name: Mapped[str] = mapped_column(db.String(120), nullable=False)
    password_hash: Mapped[str] = mapped_column(db.String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)

    memberships = relationship("Membership", back_populates="user")


class Membership(db.Model):
    __tablename__ = "membership"
    __table_args__ = (UniqueConstraint("user_id", "org_id", name="uq_membership_user_org"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("user_account.id"), nullable=False)
    org_id: Mapped[int] = mapped_column(ForeignKey("organization.id"), nullable=False)
    role: Mapped[str] = mapped_column(db.String(30), nullable=False, default="admin")

    user = relationship("User", back_populates="memberships")
    organization = relationship("Organization", back_populates="memberships")


class CemeterySite(db.Model):
    __tablename__ = "cemetery_site"
    __table_args__ = (UniqueConstraint("organization_id", "code", name="uq_cemetery_site_org_code"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    organization_id: Mapped[int] = mapped_column(
        ForeignKey("organization.id", ondelete="CASCADE"), nullable=False, index=True
    )
    code: Mapped[str | None] = mapped_column(db.String(30), nullable=True)
    name: Mapped[str] = mapped_column(db.String(120), nullable=False)
    description: Mapped[str | None] = mapped_column(db.Text, nullable=True)
    address: Mapped[str | None] = mapped_column(db.String(255), nullable=True)
    status: Mapped[SiteStatus] = mapped_column(
        SAEnum(SiteStatus, name="site_status"),
        nullable=False,
        default=SiteStatus.ACTIVE,
    )
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)

    organization = relationship("Organization", back_populates="sites")
    areas = relationship("CemeteryArea", back_populates="site", cascade="all, delete-orphan")

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "organization_id": self.organization_id,
            "code": self.code,
            "name": self.name,
            "description": self.description,
            "address": self.address,
            "status": self.status.value,
            "created_at": _iso(self.created_at),
        }


class _StructureNode:
    """Columns shared by area, sector and subsector."""

    id: Mapped[int] = mapped_column(primary_key=True)
    code: Mapped[str | None] = mapped_column(db.String(30), nullable=True)
    name: Mapped[str] = mapped_column(db.String(120), nullable=False)
    description: Mapped[str | None] = mapped_column(db.Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)

    parent_key = ""

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            self.parent_key: getattr(self, self.parent_key),
            "code": self.code,
            "name": self.name,
            "description": self.description,
            "is_active": self.is_active,
            "created_at": _iso(self.created_at),
        }


class CemeteryArea(_StructureNode, db.Model):
    __tablename__ = "cemetery_area"
    __table_args__ = (UniqueConstraint("site_id", "code", name="uq_cemetery_area_site_code"),)

    site_id: Mapped[int] = mapped_column(
        ForeignKey("cemetery_site.id", ondelete="CASCADE"), nullable=False, index=True
    )

    parent_key = "site_id"

    site = relationship("CemeterySite", back_populates="areas")
    sectors = relationship("CemeterySector", back_populates="area", cascade="all, delete-orphan")


class CemeterySector(_StructureNode, db.Model):
    __tablename__ = "cemetery_sector"
    __table_args__ = (UniqueConstraint("area_id", "code", name="uq_cemetery_sector_area_code"),)

    area_id: Mapped[int] = mapped_column(
        ForeignKey("cemetery_area.id", ondelete="CASCADE"), nullable=False, index=True
    )

    parent_key = "area_id"

    area = relationship("CemeteryArea", back_populates="sectors")
    subsectors = relationship("CemeterySubsector", back_populates="sector", cascade="all, delete-orphan")


class CemeterySubsector(_StructureNode, db.Model):
    __tablename__ = "cemetery_subsector"
    __table_args__ = (UniqueConstraint("sector_id", "code", name="uq_cemetery_subsector_sector_code"),)

    sector_id: Mapped[int] = mapped_column(
        ForeignKey("cemetery_sector.id", ondelete="CASCADE"), nullable=False, index=True
    )

    parent_key = "sector_id"

    sector = relationship("CemeterySector", back_populates="subsectors")
    plots = relationship("CemeteryPlot", back_populates="subsector", cascade="all, delete-orphan")


class PlotType(db.Model):
    __tablename__ = "cemetery_plot_type"

    id: Mapped[int] = mapped_column(primary_key=True)
    code: Mapped[str] = mapped_column(db.String(30), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(db.String(120), nullable=False)
    default_capacity_spaces: Mapped[int] = mapped_column(nullable=False, default=1)
    description: Mapped[str | None] = mapped_column(db.Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "default_capacity_spaces": self.default_capacity_spaces,
            "description": self.description,
        }


class CemeteryPlot(db.Model):
    __tablename__ = "cemetery_plot"
    __table_args__ = (
        UniqueConstraint("subsector_id", "code", name="uq_cemetery_plot_subsector_code"),
        CheckConstraint("capacity_spaces > 0", name="ck_cemetery_plot_capacity"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    subsector_id: Mapped[int] = mapped_column(
        ForeignKey("cemetery_subsector.id", ondelete="CASCADE"), nullable=False, index=True
    )
    plot_type_id: Mapped[int] = mapped_column(ForeignKey("cemetery_plot_type.id"), nullable=False)
    code: Mapped[str] = mapped_column(db.String(30), nullable=False)
    row_label: Mapped[str | None] = mapped_column(db.String(20), nullable=True)
    column_label: Mapped[str | None] = mapped_column(db.String(20), nullable=True)
    capacity_spaces: Mapped[int] = mapped_column(nullable=False)
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)
    notes: Mapped[str | None] = mapped_column(db.Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)

    subsector = relationship("CemeterySubsector", back_populates="plots")
    plot_type = relationship("PlotType")
    spaces = relationship(
        "CemeterySpace",
        back_populates="plot",
        cascade="all, delete-orphan",
        order_by="CemeterySpace.position",
    )

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "subsector_id": self.subsector_id,
            "plot_type_id": self.plot_type_id,
            "plot_type_code": self.plot_type.code if self.plot_type else None,
            "plot_type_name": self.plot_type.name if self.plot_type else None,
            "code": self.code,
            "row_label": self.row_label,
            "column_label": self.column_label,
            "capacity_spaces": self.capacity_spaces,
            "is_active": self.is_active,
            "notes": self.notes,
            "created_at": _iso(self.created_at),
        }


class CemeterySpace(db.Model):
    __tablename__ = "cemetery_space"
    __table_args__ = (
        UniqueConstraint("plot_id", "position", name="uq_cemetery_space_plot_position"),
        CheckConstraint("position > 0", name="ck_cemetery_space_position"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    plot_id: Mapped[int] = mapped_column(
        ForeignKey("cemetery_plot.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(nullable=False)
    status: Mapped[SpaceStatus] = mapped_column(
        SAEnum(SpaceStatus, name="space_status"),
        nullable=False,
        default=SpaceStatus.AVAILABLE,
    )
    notes: Mapped[str | None] = mapped_column(db.Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)

    plot = relationship("CemeteryPlot", back_populates="spaces")

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "plot_id": self.plot_id,
            "position": self.position,
            "status": self.status.value,
            "notes": self.notes,
            "created_at": _iso(self.created_at),
        }


class DeceasedRecord(db.Model):
    __tablename__ = "deceased_record"
    __table_args__ = (
        Index("ix_deceased_record_org_site", "organization_id", "site_id"),
        Index("ix_deceased_record_full_name", "full_name"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    organization_id: Mapped[int] = mapped_column(ForeignKey("organization.id"), nullable=False)
    site_id: Mapped[int] = mapped_column(ForeignKey("cemetery_site.id"), nullable=False)
    full_name: Mapped[str] = mapped_column(db.String(200), nullable=False)
    identifier: Mapped[str | None] = mapped_column(db.String(30), nullable=True, index=True)
    date_of_birth: Mapped[date | None] = mapped_column(nullable=True)
    date_of_death: Mapped[date] = mapped_column(nullable=False)
    notes: Mapped[str | None] = mapped_column(db.Text, nullable=True)
    plot_id: Mapped[int] = mapped_column(ForeignKey("cemetery_plot.id"), nullable=False)
    space_id: Mapped[int | None] = mapped_column(
        ForeignKey("cemetery_space.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)

    plot = relationship("CemeteryPlot")
    space = relationship("CemeterySpace")

    def to_dict(self) -> dict[str, object]:
        plot = self.plot
        subsector = plot.subsector if plot else None
        sector = subsector.sector if subsector else None
        area = sector.area if sector else None
        return {
            "id": self.id,
            "full_name": self.full_name,
            "identifier": self.identifier,
            "date_of_birth": _iso(self.date_of_birth),
            "date_of_death": _iso(self.date_of_death),
            "notes": self.notes,
            "plot_id": self.plot_id,
            "space_id": self.space_id,
            "organization_id": self.organization_id,
            "site_id": self.site_id,
            "plot_code": plot.code if plot else None,
            "space_status": self.space.status.value if self.space else None,
            "space_position": self.space.position if self.space else None,
            "area_name": area.name if area else None,
            "sector_name": sector.name if sector else None,
            "subsector_name": subsector.name if subsector else None,
            "created_at": _iso(self.created_at),
        }


class BurialRequest(db.Model):
    __tablename__ = "burial_request"
    __table_args__ = (
        Index("ix_burial_request_cemetery_site", "cemetery_org_id", "cemetery_site_id"),
        Index("ix_burial_request_funeral", "funeral_org_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    funeral_org_id: Mapped[int] = mapped_column(ForeignKey("organization.id"), nullable=False)
    cemetery_org_id: Mapped[int] = mapped_column(ForeignKey("organization.id"), nullable=False)
    cemetery_site_id: Mapped[int] = mapped_column(ForeignKey("cemetery_site.id"), nullable=False)
    deceased_full_name: Mapped[str] = mapped_column(db.String(200), nullable=False)
    date_of_death: Mapped[date] = mapped_column(nullable=False)
    requested_plot_type_id: Mapped[int | None] = mapped_column(
        ForeignKey("cemetery_plot_type.id"), nullable=True
    )
    requested_date: Mapped[date | None] = mapped_column(nullable=True)
    status: Mapped[BurialRequestStatus] = mapped_column(
        SAEnum(BurialRequestStatus, name="burial_request_status"),
        nullable=False,
        default=BurialRequestStatus.PENDING,
    )
    assigned_plot_id: Mapped[int | None] = mapped_column(
        ForeignKey("cemetery_plot.id", ondelete="SET NULL"), nullable=True
    )
    assigned_space_id: Mapped[int | None] = mapped_column(
        ForeignKey("cemetery_space.id", ondelete="SET NULL"), nullable=True
    )
    notes: Mapped[str | None] = mapped_column(db.Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)

    funeral_org = relationship("Organization", foreign_keys=[funeral_org_id])
    cemetery_org = relationship("Organization", foreign_keys=[cemetery_org_id])
    cemetery_site = relationship("CemeterySite")

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "funeral_org_id": self.funeral_org_id,
            "cemetery_org_id": self.cemetery_org_id,
            "cemetery_site_id": self.cemetery_site_id,
            "deceased_full_name": self.deceased_full_name,
            "date_of_death": _iso(self.date_of_death),
            "requested_plot_type_id": self.requested_plot_type_id,
            "requested_date": _iso(self.requested_date),
            "status": self.status.value,
            "assigned_plot_id": self.assigned_plot_id,
            "assigned_space_id": self.assigned_space_id,
            "notes": self.notes,
            "created_at": _iso(self.created_at),
            "funeral_name": self.funeral_org.name if self.funeral_org else None,
            "cemetery_name": self.cemetery_org.name if self.cemetery_org else None,
            "cemetery_site_name": self.cemetery_site.name if self.cemetery_site else None,
        }


DEMO_PLOT_TYPES: tuple[tuple[str, str, int, str], ...] = (
    ("NICHO", "Nicho", 1, "Nicho en galería"),
    ("SEPULTURA", "Sepultura en tierra", 3, "Sepultura familiar en tierra"),
    ("MAUSOLEO", "Mausoleo", 6, "Mausoleo familiar"),
    ("COLUMBARIO", "Columbario", 2, "Columbario para ánforas"),
)


def seed_plot_types(session) -> dict[str, PlotType]:
    types: dict[str, PlotType] = {}
    for code, name, capacity, description in DEMO_PLOT_TYPES:
        plot_type = PlotType.query.filter_by(code=code).first()
        if plot_type is None:
            plot_type = PlotType(
                code=code,
                name=name,
                default_capacity_spaces=capacity,
                description=description,
            )
            session.add(plot_type)
        types[code] = plot_type
    session.flush()
    return types


def _seed_plot(session, subsector: CemeterySubsector, plot_type: PlotType, code: str, row: str) -> CemeteryPlot:
    plot = CemeteryPlot(
        subsector_id=subsector.id,
        plot_type_id=plot_type.id,
        code=code,
        row_label=row,
        column_label=code.rsplit("-", 1)[-1],
        capacity_spaces=plot_type.default_capacity_spaces,
    )
    session.add(plot)
    session.flush()
    for position in range(1, plot.capacity_spaces + 1):
        session.add(CemeterySpace(plot_id=plot.id, position=position, status=SpaceStatus.AVAILABLE))
    session.flush()
    return plot


def seed_demo_data(session) -> None:
    types = seed_plot_types(session)

    cemetery = Organization(name="Parque del Recuerdo Demo", code="CEM-DEMO", type=OrganizationType.CEMENTERIO)
    other_cemetery = Organization(name="Cementerio General Demo", code="CEM-OTRO", type=OrganizationType.CEMENTERIO)
    funeral = Organization(name="Funeraria Demo", code="FUN-DEMO", type=OrganizationType.FUNERARIA)
    session.add_all([cemetery, other_cemetery, funeral])
    session.flush()

    admin = User(
        email="admin@cementerio.local",
        full_name="Administrador Cementerio",
        password_hash=generate_password_hash("admin123"),
    )
    operator = User(
        email="operador@cementerio.local",
        full_name="Operador Cementerio",
        password_hash=generate_password_hash("operador123"),
    )
    other_admin = User(
        email="admin@otrocementerio.local",
        full_name="Administrador Otro Cementerio",
        password_hash=generate_password_hash("admin123"),
    )
    funeral_admin = User(
        email="admin@funeraria.local",
        full_name="Administrador Funeraria",
        password_hash=generate_password_hash("admin123"),
    )
    session.add_all([admin, operator, other_admin, funeral_admin])
    session.flush()
    session.add_all(
        [
            Membership(user_id=admin.id, org_id=cemetery.id, role="admin"),
            Membership(user_id=operator.id, org_id=cemetery.id, role="operator"),
            Membership(user_id=other_admin.id, org_id=other_cemetery.id, role="admin"),
            Membership(user_id=funeral_admin.id, org_id=funeral.id, role="admin"),
        ]
    )

    site = CemeterySite(organization_id=cemetery.id, code="CENTRAL", name="Sede Central", address="Av. Recoleta 1000")
    annex = CemeterySite(organization_id=cemetery.id, code="ANEXO", name="Sede Anexo")
    other_site = CemeterySite(organization_id=other_cemetery.id, code="GENERAL", name="Sede General")
    session.add_all([site, annex, other_site])
    session.flush()

    plots: dict[int, list[CemeteryPlot]] = {}
    for target_site in (site, other_site):
        area = CemeteryArea(site_id=target_site.id, code="A", name="Área A")
        session.add(area)
        session.flush()
        sector = CemeterySector(area_id=area.id, code="S1", name="Sector 1")
        session.add(sector)
        session.flush()
        subsector = CemeterySubsector(sector_id=sector.id, code="SS1", name="Subsector 1")
        session.add(subsector)
        session.flush()
        plots[target_site.id] = [
            _seed_plot(session, subsector, types["SEPULTURA"], "P-1", "F1"),
            _seed_plot(session, subsector, types["NICHO"], "N-1", "F1"),
        ]

    first_name, last_name = generate_demo_names(1)[0]
    occupied_plot = plots[site.id][0]
    occupied_space = occupied_plot.spaces[0]
    occupied_space.status = SpaceStatus.OCCUPIED
    session.add(
        DeceasedRecord(
            organization_id=cemetery.id,
            site_id=site.id,
            full_name=f"{first_name} {last_name}",
            identifier="12.345.678-5",
            date_of_death=date(2024, 5, 12),
            plot_id=occupied_plot.id,
            space_id=occupied_space.id,
        )
    )
    session.add(
        BurialRequest(
            funeral_org_id=funeral.id,
            cemetery_org_id=cemetery.id,
            cemetery_site_id=site.id,
            deceased_full_name="Rosa Soto Fuentes",
            date_of_death=date(2026, 1, 15),
            requested_plot_type_id=types["SEPULTURA"].id,
            status=BurialRequestStatus.PENDING,
        )
    )
    session.commit()
