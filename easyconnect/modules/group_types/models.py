# Database table: group_types
# Read-only taxonomy maintained outside this service.
#
# group_types:
#   id: integer (primary key)
#   group_type: text
#   sub_types: jsonb   -- list of {id?, name, description}
#
# groups.group_type_id references group_types.id
