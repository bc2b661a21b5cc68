"""
Registry of the console's management screens.

A :class:`Resource` ties a backend collection to the serializer of its
modal form, the columns of its table, the filters of its filter bar and
the roles allowed to open it.  Views, templates and the filtering code
are all driven from this table so that every screen behaves the same.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..operators import ADMIN, DOCTOR, STAFF
from ..serializers.appointments import APPOINTMENT_STATUSES, AppointmentSerializer
from ..serializers.departments import DepartmentSerializer
from ..serializers.doctors import DoctorSerializer
from ..serializers.medical_records import RECORD_TYPES, MedicalRecordSerializer
from ..serializers.medications import DOSAGE_FORMS, MedicationSerializer
from ..serializers.notifications import PRIORITIES, NotificationSerializer
from ..serializers.patients import BLOOD_GROUPS, PatientSerializer
from ..serializers.payments import PAYMENT_STATUSES, PaymentSerializer
from ..serializers.prescriptions import PRESCRIPTION_STATUSES, PrescriptionSerializer
from ..serializers.staff import StaffSerializer

READ = 'r'
WRITE = 'rw'

# Column kinds whose cell text is resolved through the lookups; search
# matches the resolved text as well as the raw row.
LABEL_KINDS = frozenset({'name', 'patient', 'doctor', 'appointment', 'department'})


class UnknownResource(KeyError):
    def __str__(self) -> str:
        return f'unknown resource: {self.args[0]}'


@dataclass(frozen=True)
class Column:
    key: str
    label: str
    # text | name | patient | doctor | appointment | department | date | time | datetime | money | bool | status
    kind: str = 'text'


@dataclass(frozen=True)
class FilterSpec:
    param: str
    label: str
    field: str
    # choice | flag | date | date_contains | exact
    kind: str = 'choice'
    choices: tuple = ()
    # flag filters: filter value -> expected truthiness of ``field``
    flags: tuple = ()
    # exact filters may offer a lookup collection as options
    lookup: Optional[str] = None


@dataclass(frozen=True)
class Resource:
    key: str
    title: str
    singular: str
    path: str
    id_field: str
    serializer: type
    columns: tuple
    search_fields: tuple = ()
    filters: tuple = ()
    roles: dict = field(default_factory=dict)
    list_path: Optional[str] = None
    create_path: Optional[str] = None
    # role -> list path for operators who only see their own rows;
    # formatted with the operator's ``role_id``
    scoped_lists: dict = field(default_factory=dict)
    # action -> roles allowed to run it without write access
    action_roles: dict = field(default_factory=dict)
    fallback: bool = True
    can_create: bool = True
    can_update: bool = True
    can_delete: bool = True

    def collection_path(self, operator=None) -> str:
        role = getattr(operator, 'role', None)
        if role in self.scoped_lists:
            return self.scoped_lists[role].format(role_id=operator.role_id)
        return self.list_path or self.path

    def item_path(self, entity_id) -> str:
        return f'{self.path}/{entity_id}'

    def can_read(self, role: Optional[str]) -> bool:
        return role in self.roles

    def can_write(self, role: Optional[str]) -> bool:
        return self.roles.get(role) == WRITE

    def can_act(self, role: Optional[str], action: str) -> bool:
        return role in self.action_roles.get(action, ()) or self.can_write(role)

    @property
    def label_columns(self) -> list:
        return [c for c in self.columns if c.kind in LABEL_KINDS]

    def entity_id(self, entity: dict):
        value = entity.get(self.id_field)
        if value is None:
            value = entity.get('id')
        return value


def _choices(values) -> tuple:
    return tuple((v, v.replace('_', ' ').title()) for v in values)


REGISTRY: dict[str, Resource] = {}


def register(resource: Resource) -> Resource:
    REGISTRY[resource.key] = resource
    return resource


register(Resource(
    key='staff', title='Staff', singular='Staff Member',
    path='/staff', list_path='/staff/profiles', create_path='/staff/create',
    id_field='staffId', serializer=StaffSerializer,
    columns=(
        Column('staffId', 'ID'),
        Column('name', 'Name', 'name'),
        Column('email', 'Email'),
        Column('position', 'Position'),
        Column('departmentName', 'Department'),
        Column('hireDate', 'Hire Date', 'date'),
        Column('admin', 'Admin', 'bool'),
    ),
    search_fields=('staffId', 'firstName', 'lastName', 'email', 'position', 'departmentName'),
    filters=(
        FilterSpec('status', 'Status', 'admin', 'flag', choices=(('ADMIN', 'Admin'), ('STAFF', 'Staff')),
                   flags=(('ADMIN', True), ('STAFF', False))),
        FilterSpec('date', 'Hire date', 'hireDate', 'date'),
    ),
    roles={ADMIN: WRITE},
))

register(Resource(
    key='doctors', title='Doctors', singular='Doctor',
    path='/doctors', id_field='doctorId', serializer=DoctorSerializer,
    columns=(
        Column('doctorId', 'ID'),
        Column('name', 'Name', 'name'),
        Column('email', 'Email'),
        Column('specialization', 'Specialization'),
        Column('departmentId', 'Department', 'department'),
        Column('phoneNumber', 'Phone'),
    ),
    search_fields=('doctorId', 'firstName', 'lastName', 'email', 'specialization', 'licenseNumber'),
    filters=(
        FilterSpec('department', 'Department', 'departmentId', 'exact', lookup='departments'),
    ),
    roles={ADMIN: WRITE, STAFF: WRITE},
))

register(Resource(
    key='patients', title='Patients', singular='Patient',
    path='/patients', id_field='patientId', serializer=PatientSerializer,
    columns=(
        Column('patientId', 'ID'),
        Column('name', 'Name', 'name'),
        Column('email', 'Email'),
        Column('phoneNumber', 'Phone'),
        Column('bloodGroup', 'Blood Group'),
        Column('gender', 'Gender'),
    ),
    search_fields=('patientId', 'firstName', 'lastName', 'email', 'phoneNumber'),
    filters=(
        FilterSpec('gender', 'Gender', 'gender', 'choice', choices=_choices(['MALE', 'FEMALE', 'OTHER'])),
        FilterSpec('bloodGroup', 'Blood group', 'bloodGroup', 'choice', choices=tuple((b, b) for b in BLOOD_GROUPS)),
    ),
    roles={ADMIN: WRITE, STAFF: WRITE, DOCTOR: READ},
))

register(Resource(
    key='appointments', title='Appointments', singular='Appointment',
    path='/appointments', id_field='appointmentId', serializer=AppointmentSerializer,
    columns=(
        Column('appointmentId', 'ID'),
        Column('patientId', 'Patient', 'patient'),
        Column('doctorId', 'Doctor', 'doctor'),
        Column('appointmentDate', 'Date', 'date'),
        Column('startTime', 'Time', 'time'),
        Column('status', 'Status', 'status'),
        Column('appointmentFee', 'Fee', 'money'),
        Column('isPaid', 'Paid', 'bool'),
    ),
    search_fields=('appointmentId', 'reason'),
    filters=(
        FilterSpec('status', 'Status', 'status', 'choice', choices=_choices(APPOINTMENT_STATUSES)),
        FilterSpec('date', 'Date', 'appointmentDate', 'date'),
    ),
    roles={ADMIN: WRITE, STAFF: WRITE, DOCTOR: WRITE},
))

register(Resource(
    key='payments', title='Payments', singular='Payment',
    path='/payments', id_field='paymentId', serializer=PaymentSerializer,
    columns=(
        Column('paymentId', 'ID'),
        Column('patientId', 'Patient', 'patient'),
        Column('appointmentId', 'Appointment', 'appointment'),
        Column('amount', 'Amount', 'money'),
        Column('paymentMethod', 'Method', 'status'),
        Column('type', 'Type', 'status'),
        Column('status', 'Status', 'status'),
        Column('paymentDate', 'Date', 'date'),
    ),
    search_fields=('paymentId', 'transactionId', 'patientName', 'doctorName'),
    filters=(
        FilterSpec('status', 'Status', 'status', 'choice', choices=_choices(PAYMENT_STATUSES)),
        FilterSpec('date', 'Date', 'paymentDate', 'date_contains'),
    ),
    roles={ADMIN: WRITE, STAFF: WRITE},
))

register(Resource(
    key='departments', title='Departments', singular='Department',
    path='/departments', id_field='departmentId', serializer=DepartmentSerializer,
    columns=(
        Column('departmentId', 'ID'),
        Column('name', 'Name'),
        Column('description', 'Description'),
        Column('headDoctorId', 'Head Doctor', 'doctor'),
    ),
    search_fields=('name', 'description', 'headDoctorName'),
    roles={ADMIN: WRITE, STAFF: READ},
))

register(Resource(
    key='medical-records', title='Medical Records', singular='Medical Record',
    path='/medical-records', id_field='recordId', serializer=MedicalRecordSerializer,
    columns=(
        Column('recordId', 'ID'),
        Column('patientId', 'Patient', 'patient'),
        Column('doctorId', 'Doctor', 'doctor'),
        Column('recordType', 'Type', 'status'),
        Column('diagnosis', 'Diagnosis'),
        Column('recordDate', 'Date', 'date'),
    ),
    search_fields=('recordId', 'diagnosis', 'symptoms'),
    filters=(
        FilterSpec('patient', 'Patient', 'patientId', 'exact', lookup='patients'),
        FilterSpec('type', 'Record type', 'recordType', 'choice', choices=_choices(RECORD_TYPES)),
        FilterSpec('date', 'Date', 'recordDate', 'date'),
    ),
    roles={ADMIN: WRITE, STAFF: WRITE, DOCTOR: WRITE},
))

register(Resource(
    key='prescriptions', title='Prescriptions', singular='Prescription',
    path='/prescriptions', id_field='prescriptionId', serializer=PrescriptionSerializer,
    columns=(
        Column('prescriptionId', 'ID'),
        Column('patientId', 'Patient', 'patient'),
        Column('doctorId', 'Doctor', 'doctor'),
        Column('prescriptionDate', 'Date', 'date'),
        Column('expiryDate', 'Expires', 'date'),
        Column('status', 'Status', 'status'),
        Column('refillsRemaining', 'Refills Left'),
    ),
    search_fields=('prescriptionId',),
    filters=(
        FilterSpec('status', 'Status', 'status', 'choice', choices=_choices(PRESCRIPTION_STATUSES)),
        FilterSpec('date', 'Date', 'prescriptionDate', 'date'),
    ),
    roles={ADMIN: WRITE, DOCTOR: WRITE},
))

register(Resource(
    key='medications', title='Medications', singular='Medication',
    path='/medications', id_field='medicationId', serializer=MedicationSerializer,
    columns=(
        Column('medicationId', 'ID'),
        Column('name', 'Name'),
        Column('genericName', 'Generic Name'),
        Column('brand', 'Brand'),
        Column('dosageForm', 'Form', 'status'),
        Column('strength', 'Strength'),
        Column('stockQuantity', 'Stock'),
        Column('price', 'Price', 'money'),
    ),
    search_fields=('name', 'genericName', 'brand'),
    filters=(
        FilterSpec('form', 'Dosage form', 'dosageForm', 'choice', choices=_choices(DOSAGE_FORMS)),
    ),
    roles={ADMIN: WRITE, STAFF: WRITE, DOCTOR: READ},
))

register(Resource(
    key='notifications', title='Notifications', singular='Notification',
    path='/api/notifications', id_field='id', serializer=NotificationSerializer,
    fallback=False, can_update=False,
    scoped_lists={DOCTOR: '/api/notifications/recipient/DOCTOR/{role_id}'},
    action_roles={'read': (ADMIN, STAFF, DOCTOR)},
    columns=(
        Column('id', 'ID'),
        Column('title', 'Title'),
        Column('message', 'Message'),
        Column('recipientType', 'Recipient', 'status'),
        Column('recipientId', 'Recipient ID'),
        Column('priority', 'Priority', 'status'),
        Column('read', 'Read', 'bool'),
        Column('createdAt', 'Sent', 'datetime'),
    ),
    search_fields=('title', 'message', 'senderUsername', 'recipientId'),
    filters=(
        FilterSpec('priority', 'Priority', 'priority', 'choice', choices=_choices(PRIORITIES)),
        FilterSpec('read', 'Read', 'read', 'flag', choices=(('READ', 'Read'), ('UNREAD', 'Unread')),
                   flags=(('READ', True), ('UNREAD', False))),
    ),
    roles={ADMIN: WRITE, STAFF: WRITE, DOCTOR: READ},
))


def get_resource(key: str) -> Resource:
    try:
        return REGISTRY[key]
    except KeyError:
        raise UnknownResource(key) from None


def resources_for(role: Optional[str]) -> list[Resource]:
    """Screens the role may open, in sidebar order."""
    return [r for r in REGISTRY.values() if r.can_read(role)]
