from . import crud_booking
from . import crud_room_assignment
from . import crud_participant
from . import crud_folio

# Modules are exposed as-is, e.g. ``crud.crud_folio.add_charge``.
