from mako.template import Template

# Aggregator module: eager imports first, then the route table in discovery order
ROUTE_TABLE_TEMPLATE = Template(
	"""// Generated by fsroutes. Do not edit.
% for statement in imports:
${statement}
% endfor

export default [
% for route in routes:
  {
    path: ${route.path},
    sync: ${route.sync},
    async: ${route.async_thunk},
  },
% endfor
];
"""
)
