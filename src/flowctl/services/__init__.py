"""Service layer: operations returning :class:`~flowctl.services.result.ServiceResult`."""
