from .staff import Staff, Role, StaffRole, SessionToken
from .catalog import Client, Service, Product
from .appointments import Appointment, AppointmentLine, AppointmentPayment
from .sales import Sale, SaleLine, SalePayment

__all__ = [
    'Staff', 'Role', 'StaffRole', 'SessionToken',
    'Client', 'Service', 'Product',
    'Appointment', 'AppointmentLine', 'AppointmentPayment',
    'Sale', 'SaleLine', 'SalePayment',
]
