from supabase import Client
from easyconnect.modules.group_types.schemas import GroupType
from easyconnect.core.serialization import decode_rows
from typing import List
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class GroupTypeService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_group_types(self) -> List[GroupType]:
        """List group types with their sub types"""
        try:
            result = self.supabase.table("group_types")\
                .select("id, group_type, sub_types")\
                .order("id")\
                .execute()
            return decode_rows(GroupType, result.data)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error fetching group types: {e}")
            raise HTTPException(status_code=500, detail=str(e))
