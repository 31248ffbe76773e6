"""
User-facing error catalog (Spanish).

Keys are backend error codes or fragments of raw backend messages.
Kept in sync with the backend's code catalog; suggestions sent by the
backend take priority over the ones configured here.
"""

DEFAULT_SUGGESTION = "Si el problema persiste, contacta al administrador"

UNEXPECTED_ERROR_MESSAGE = "Ocurrió un error inesperado"
UNEXPECTED_ERROR_SUGGESTION = (
    "Por favor intenta nuevamente o contacta al administrador si el problema persiste"
)


# =============================================================================
# GENERAL TRANSLATIONS
# =============================================================================
# Insertion order matters for message-fragment matching: first match wins.

ERROR_TRANSLATIONS: dict[str, dict[str, str]] = {
    # Network
    "NETWORK_ERROR": {
        "message": "Error de conexión con el servidor",
        "suggestion": "Verifica tu conexión a internet e intenta nuevamente",
    },
    "TIMEOUT_ERROR": {
        "message": "Tiempo de espera agotado",
        "suggestion": "La petición tardó demasiado. Intenta nuevamente",
    },
    "PARSE_ERROR": {
        "message": "Error al procesar la respuesta del servidor",
        "suggestion": "Intenta nuevamente. Si el problema persiste, contacta al administrador",
    },

    # Terminal session
    "SCAN_IN_PROGRESS": {
        "message": "Ya hay un escaneo en proceso",
        "suggestion": "Espera a que termine el escaneo anterior antes de escanear otro código",
    },
    "NO_PENDING_CONFIRMATION": {
        "message": "No hay un pallet pendiente de confirmación",
        "suggestion": "Escanea el código del pallet antes de confirmar",
    },

    # Validation
    "EMPTY": {
        "message": "El código es requerido",
        "suggestion": "Escanea o ingresa un código antes de continuar",
    },
    "VALIDATION_ERROR": {
        "message": "Error de validación",
        "suggestion": "Verifica que los datos ingresados sean correctos",
    },
    "INVALID_BOX_CODE": {
        "message": "El código de caja no tiene el largo esperado",
        "suggestion": "Verifica que hayas escaneado el código completo",
    },
    "INVALID_PALLET_CODE": {
        "message": "El código de tarja no tiene el largo esperado",
        "suggestion": "Verifica que hayas escaneado el código completo",
    },
    "INVALID_LOCATION": {
        "message": "La ubicación proporcionada no es válida",
        "suggestion": "Verifica que la ubicación sea correcta",
    },
    "INVALID_CALIBRE": {
        "message": "El calibre no coincide con lo solicitado",
        "suggestion": "El calibre de la caja/pallet no está en los calibres solicitados para esta venta",
    },
    "BOX_COUNT_EXCEEDED": {
        "message": "Excede la cantidad de cajas solicitadas",
        "suggestion": "Has escaneado más cajas de las solicitadas para este calibre. Remueve algunas cajas",
    },
    "EGGS_EXCEEDED": {
        "message": "Excede la cantidad de huevos permitida",
        "suggestion": "La cantidad de huevos excede el límite permitido",
    },
    "EGGS_INCOMPLETE": {
        "message": "Faltan cajas para completar la venta",
        "suggestion": "Aún faltan cajas por escanear. Continúa escaneando hasta completar todas las cajas solicitadas",
    },
    "NO_REQUESTED_CALIBRES": {
        "message": "Esta venta no tiene calibres solicitados",
        "suggestion": "Esta venta no se puede despachar porque no tiene calibres definidos",
    },
    "SALE_NOT_DRAFT": {
        "message": "La venta no se puede modificar",
        "suggestion": "Solo se pueden modificar ventas en borrador (DRAFT). Esta venta ya fue confirmada",
    },
    "Box code must be": {
        "message": "El código de caja no tiene el largo esperado",
        "suggestion": "Verifica que hayas escaneado correctamente el código",
    },
    "Invalid box code": {
        "message": "Código de caja inválido",
        "suggestion": "Asegúrate de escanear el código completo",
    },
    "Invalid pallet code": {
        "message": "Código de pallet inválido",
        "suggestion": "Asegúrate de escanear el código completo de la tarja",
    },

    # Not found
    "NOT_FOUND": {
        "message": "No encontrado",
        "suggestion": "Verifica que el código sea correcto",
    },
    "BOX_NOT_FOUND": {
        "message": "La caja no fue encontrada en el sistema",
        "suggestion": "El código de caja no existe en el sistema. Verifica que hayas escaneado correctamente",
    },
    "PALLET_NOT_FOUND": {
        "message": "La tarja no fue encontrada en el sistema",
        "suggestion": "El código de tarja no existe en el sistema. Verifica que hayas escaneado correctamente",
    },
    "CUSTOMER_NOT_FOUND": {
        "message": "El cliente no fue encontrado",
        "suggestion": "El cliente con el ID proporcionado no existe en el sistema",
    },
    "SALE_NOT_FOUND": {
        "message": "La venta no fue encontrada",
        "suggestion": "La venta con el ID proporcionado no existe en el sistema",
    },
    "BOX_NOT_IN_SALE": {
        "message": "La caja no está en esta venta",
        "suggestion": "Esta caja no está en la venta actual. Verifica el código",
    },
    "PALLET_NOT_IN_SALE": {
        "message": "El pallet no está en esta venta",
        "suggestion": "Este pallet no está en la venta actual. Verifica el código",
    },
    "Box not found": {
        "message": "Caja no encontrada",
        "suggestion": "El código de caja no existe en el sistema. Verifica que hayas escaneado correctamente",
    },
    "Pallet not found": {
        "message": "Tarja no encontrada",
        "suggestion": "El código de tarja no existe en el sistema. Verifica que hayas escaneado correctamente",
    },
    "no fue encontrada": {
        "message": "El código no fue encontrado en el sistema",
        "suggestion": "Verifica que el código escaneado sea correcto. Si es una caja nueva, asegúrate de registrarla primero",
    },
    "no fue encontrado": {
        "message": "El código no fue encontrado en el sistema",
        "suggestion": "Verifica que el código escaneado sea correcto",
    },

    # Conflict
    "CONFLICT": {
        "message": "Conflicto en la operación",
        "suggestion": "El recurso ya existe o fue modificado. Intenta actualizar la página",
    },
    "BOX_ALREADY_EXISTS": {
        "message": "La caja ya existe en el sistema",
        "suggestion": "Esta caja ya fue registrada anteriormente",
    },
    "PALLET_ALREADY_EXISTS": {
        "message": "La tarja ya existe en el sistema",
        "suggestion": "Este código de tarja ya fue registrado. Genera un código nuevo",
    },
    "BOX_ALREADY_IN_SALE": {
        "message": "La caja ya está en esta venta",
        "suggestion": "Esta caja ya fue agregada. Verifica que no hayas escaneado el mismo código dos veces",
    },
    "PALLET_ALREADY_IN_SALE": {
        "message": "El pallet ya está en esta venta",
        "suggestion": "Este pallet ya fue agregado. Verifica que no hayas escaneado el mismo código dos veces",
    },
    "CUSTOMER_ALREADY_EXISTS": {
        "message": "El cliente ya existe en el sistema",
        "suggestion": "Ya existe un cliente con el email proporcionado",
    },
    "BOX_NOT_IN_BODEGA": {
        "message": "La caja no está en BODEGA",
        "suggestion": "Solo se pueden agregar cajas que estén en BODEGA. Verifica la ubicación de la caja",
    },
    "PALLET_NOT_IN_BODEGA": {
        "message": "El pallet no está en BODEGA",
        "suggestion": "Solo se pueden agregar pallets que estén en BODEGA. Verifica la ubicación del pallet",
    },
    "PALLET_NO_BOXES_IN_BODEGA": {
        "message": "El pallet no tiene cajas en BODEGA",
        "suggestion": "El pallet no tiene cajas disponibles en BODEGA para agregar a la venta",
    },
    "Box with code": {
        "message": "La caja ya existe en el sistema",
        "suggestion": "Esta caja ya fue registrada anteriormente",
    },

    # Location / operation
    "Invalid location": {
        "message": "Ubicación inválida",
        "suggestion": "Verifica que la ubicación sea correcta",
    },
    "Cannot move": {
        "message": "No se puede mover",
        "suggestion": "La operación de movimiento no es válida para este estado",
    },

    # Server
    "INTERNAL_ERROR": {
        "message": "Error interno del servidor",
        "suggestion": "Ocurrió un error inesperado. Si el problema persiste, contacta al administrador",
    },
    "DATABASE_ERROR": {
        "message": "Error de base de datos",
        "suggestion": "Error al acceder a la base de datos. Intenta nuevamente en unos momentos",
    },
    "SERVICE_UNAVAILABLE": {
        "message": "Servicio no disponible",
        "suggestion": "El servicio está temporalmente no disponible. Intenta nuevamente más tarde",
    },

    # Rate limit
    "RATE_LIMIT_EXCEEDED": {
        "message": "Demasiadas solicitudes",
        "suggestion": "Has excedido el límite de solicitudes. Por favor, espera unos momentos e intenta nuevamente",
    },
    "THROTTLING_ERROR": {
        "message": "Servicio temporalmente sobrecargado",
        "suggestion": "El servicio está temporalmente sobrecargado. Por favor, intente nuevamente",
    },

    # DynamoDB exceptions leaking from the backend
    "ResourceNotFoundException": {
        "message": "Recurso no encontrado",
        "suggestion": "El recurso solicitado no existe en la base de datos",
    },
    "ConditionalCheckFailedException": {
        "message": "La operación falló porque el recurso fue modificado",
        "suggestion": "Intenta actualizar la página y vuelve a intentar",
    },
    "ThrottlingException": {
        "message": "El servicio está temporalmente sobrecargado",
        "suggestion": "Espera unos segundos e intenta nuevamente",
    },
}


# =============================================================================
# CONTEXT TRANSLATIONS
# =============================================================================
# Operation-specific wording; checked before the general table.

_CODE_NOT_FOUND = {
    "message": "Código no encontrado",
    "suggestion": "El código escaneado no existe en el sistema. Verifica que sea correcto",
}

_CANNOT_MOVE_MISSING = {
    "message": "No se puede mover: el código no existe",
    "suggestion": "Verifica que el código sea correcto antes de intentar moverlo",
}

CONTEXT_ERROR_MESSAGES: dict[str, dict[str, dict[str, str]]] = {
    "scan": {
        "NOT_FOUND": _CODE_NOT_FOUND,
        "BOX_NOT_FOUND": _CODE_NOT_FOUND,
        "PALLET_NOT_FOUND": _CODE_NOT_FOUND,
        "VALIDATION_ERROR": {
            "message": "Código inválido",
            "suggestion": "El formato del código no es válido. Verifica que sea un código de caja o de tarja",
        },
    },
    "move": {
        "NOT_FOUND": _CANNOT_MOVE_MISSING,
        "BOX_NOT_FOUND": _CANNOT_MOVE_MISSING,
        "PALLET_NOT_FOUND": _CANNOT_MOVE_MISSING,
        "VALIDATION_ERROR": {
            "message": "No se puede mover: ubicación inválida",
            "suggestion": "Verifica que la ubicación de destino sea válida",
        },
        "INVALID_LOCATION": {
            "message": "No se puede mover: ubicación inválida",
            "suggestion": "Verifica que la ubicación de destino sea válida para este tipo de código",
        },
    },
    "create": {
        "CONFLICT": {
            "message": "El código ya existe",
            "suggestion": "Este código ya fue registrado anteriormente. Verifica que no sea un duplicado",
        },
        "VALIDATION_ERROR": {
            "message": "Datos inválidos",
            "suggestion": "Revisa que todos los campos requeridos estén completos y sean válidos",
        },
    },
    "dispatch": {
        "SALE_NOT_DRAFT": {
            "message": "La venta no se puede modificar",
            "suggestion": "Solo se pueden modificar ventas en borrador (DRAFT). Esta venta ya fue confirmada.",
        },
        "NO_REQUESTED_CALIBRES": {
            "message": "Esta venta no tiene calibres solicitados",
            "suggestion": "Esta venta no se puede despachar porque no tiene calibres definidos.",
        },
        "BOX_ALREADY_IN_SALE": {
            "message": "La caja ya está en esta venta",
            "suggestion": "Esta caja ya fue agregada. Verifica que no hayas escaneado el mismo código dos veces.",
        },
        "PALLET_ALREADY_IN_SALE": {
            "message": "El pallet ya está en esta venta",
            "suggestion": "Este pallet ya fue agregado. Verifica que no hayas escaneado el mismo código dos veces.",
        },
        "BOX_NOT_IN_BODEGA": {
            "message": "La caja no está en BODEGA",
            "suggestion": "Solo se pueden agregar cajas que estén en BODEGA. Verifica la ubicación de la caja.",
        },
        "PALLET_NOT_IN_BODEGA": {
            "message": "El pallet no está en BODEGA",
            "suggestion": "Solo se pueden agregar pallets que estén en BODEGA. Verifica la ubicación del pallet.",
        },
        "PALLET_NO_BOXES_IN_BODEGA": {
            "message": "El pallet no tiene cajas en BODEGA",
            "suggestion": "El pallet no tiene cajas disponibles en BODEGA para agregar a la venta.",
        },
        "INVALID_CALIBRE": {
            "message": "El calibre no coincide con lo solicitado",
            "suggestion": "El calibre de la caja/pallet no está en los calibres solicitados para esta venta.",
        },
        "BOX_COUNT_EXCEEDED": {
            "message": "Excede la cantidad de cajas solicitadas",
            "suggestion": "Has escaneado más cajas de las solicitadas para este calibre. Remueve algunas cajas.",
        },
        "EGGS_INCOMPLETE": {
            "message": "Faltan cajas para completar la venta",
            "suggestion": "Aún faltan cajas por escanear. Continúa escaneando hasta completar todas las cajas solicitadas.",
        },
        "BOX_NOT_IN_SALE": {
            "message": "La caja no está en esta venta",
            "suggestion": "Esta caja no está en la venta actual. Verifica el código.",
        },
        "PALLET_NOT_IN_SALE": {
            "message": "El pallet no está en esta venta",
            "suggestion": "Este pallet no está en la venta actual. Verifica el código.",
        },
    },
    "issue": {
        "VALIDATION_ERROR": {
            "message": "El reporte no es válido",
            "suggestion": "Describe el problema con al menos 10 caracteres",
        },
    },
}
